"""
News-to-image workflow: prompts, step functions and the step graph.
"""
