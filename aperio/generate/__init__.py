"""Script, article and fallback content generation."""
