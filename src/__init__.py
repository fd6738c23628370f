"""spacetraveling: a static blog front-end for a headless CMS.

Fetches posts from the content API, derives reading time and edit
status, and renders navigable HTML pages, either exported as a static
site or served live with preview mode.
"""

__version__ = "0.1.0"
