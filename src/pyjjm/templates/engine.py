"""
Jinja2 template engine for JJM file generation.

Headers of written control and data files are rendered from Jinja2
templates; the field values themselves are formatted by the structured
writer so that they read back exactly.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape

# Default template directory
TEMPLATES_DIR = Path(__file__).parent / "jjm"


class TemplateEngine:
    """
    Template engine for JJM file headers.

    Uses Jinja2 for rendering headers; custom filters format comments
    the way the JJM reader skips them.
    """

    def __init__(
        self,
        template_dir: Path | str | None = None,
        use_package_templates: bool = True,
    ) -> None:
        """
        Initialize the template engine.

        Args:
            template_dir: Custom template directory (optional)
            use_package_templates: If True, also load built-in templates
        """
        loaders = []

        # Custom templates take precedence over the packaged ones
        if template_dir:
            loaders.append(FileSystemLoader(str(template_dir)))
        if use_package_templates and TEMPLATES_DIR.exists():
            loaders.append(FileSystemLoader(str(TEMPLATES_DIR)))

        self.env = Environment(
            loader=ChoiceLoader(loaders) if loaders else None,
            autoescape=select_autoescape(default=False),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._register_filters()

    def _register_filters(self) -> None:
        """Register custom Jinja2 filters for JJM formatting."""
        from pyjjm.templates.filters import register_all_filters

        register_all_filters(self.env)

    def render_string(self, template_str: str, **context) -> str:
        """
        Render a template from a string.

        Args:
            template_str: Template string
            **context: Template context variables

        Returns:
            Rendered string
        """
        template = self.env.from_string(template_str)
        return template.render(**context)

    def render_template(self, template_name: str, **context) -> str:
        """
        Render a template from a file.

        Args:
            template_name: Name of the template file
            **context: Template context variables

        Returns:
            Rendered string
        """
        template = self.env.get_template(template_name)
        return template.render(**context)
