class NewsAnalysisPrompts:
    """Prompts for summarizing a batch of news articles"""

    @staticmethod
    def get_analysis_system_prompt() -> str:
        return """You are a news analyst. Analyze the following news articles and identify the most significant events of the period.

Reply using exactly this layout and nothing else:

SUMMARY: <one paragraph summarizing the main events>
THEMES: <theme 1>, <theme 2>, <theme 3>, <theme 4>, <theme 5>

Provide exactly five short themes separated by commas."""

    @staticmethod
    def build_news_context(articles) -> str:
        return "\n".join(
            f"Title: {article.title}\nDescription: {article.description}\nSource: {article.source}\n"
            for article in articles
        )


class ImagePromptPrompts:
    """Prompts for turning an analysis into an image-generation prompt"""

    @staticmethod
    def get_image_prompt_system_prompt() -> str:
        return """You are an expert at creating detailed image generation prompts. Create a vivid, detailed prompt for a single image that represents the main themes of the news analysis.

Write one descriptive paragraph of under 100 words. Describe composition, mood, colour and style. Do not include text, logos or real people's faces in the image."""

    @staticmethod
    def build_image_prompt_request(summary: str, themes) -> str:
        return f"""Based on this news analysis, create a detailed image generation prompt:

Summary: {summary}
Themes: {", ".join(themes)}"""
