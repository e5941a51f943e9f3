"""Static blog generator: Markdown content with front matter rendered into a page shell."""

__version__ = "0.1.0"
