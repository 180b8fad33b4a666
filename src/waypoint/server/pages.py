"""Error page presentation.

The classifier decides *what* to show; a renderer decides *how*. The
default renderer uses a kida template: either the built-in one below or
``AppConfig.error_template`` loaded from ``AppConfig.template_dir``.

Templates receive ``status``, ``message``, ``debug``, and, only when
debug is on and the failure was a server error, ``failure`` and
``failure_type``.
"""

from __future__ import annotations

from typing import Protocol

from kida import Environment, FileSystemLoader

from waypoint.config import AppConfig

DEFAULT_ERROR_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head><title>{{ status }} {{ message }}</title></head>
<body>
<h1>{{ status }}</h1>
<p>{{ message }}</p>
{% if failure %}<pre class="waypoint-failure">{{ failure_type }}: {{ failure }}</pre>{% end %}
</body>
</html>
"""


class ErrorPageRenderer(Protocol):
    """Renders the body of an error response."""

    def render_error_page(
        self,
        status: int,
        message: str,
        failure: BaseException | None = None,
    ) -> str: ...


class TemplateErrorPageRenderer:
    """Render error pages through a kida template.

    Usage::

        renderer = TemplateErrorPageRenderer.from_config(AppConfig(debug=True))
        html = renderer.render_error_page(404, "The requested resource was not found.")
    """

    __slots__ = ("_default_template", "debug", "env", "template_name")

    def __init__(
        self,
        env: Environment | None = None,
        *,
        template_name: str | None = None,
        debug: bool = False,
    ) -> None:
        self.env = env or Environment(autoescape=True)
        self.template_name = template_name
        self.debug = debug
        self._default_template = self.env.from_string(DEFAULT_ERROR_TEMPLATE)

    @classmethod
    def from_config(cls, config: AppConfig) -> TemplateErrorPageRenderer:
        if config.template_dir is not None and config.error_template is not None:
            env = Environment(
                loader=FileSystemLoader(str(config.template_dir)),
                autoescape=config.autoescape,
            )
            return cls(env, template_name=config.error_template, debug=config.debug)
        return cls(Environment(autoescape=config.autoescape), debug=config.debug)

    def render_error_page(
        self,
        status: int,
        message: str,
        failure: BaseException | None = None,
    ) -> str:
        if self.template_name is not None:
            template = self.env.get_template(self.template_name)
        else:
            template = self._default_template

        context: dict[str, object] = {
            "status": status,
            "message": message,
            "debug": self.debug,
            "failure": None,
            "failure_type": None,
        }
        if self.debug and failure is not None:
            context["failure"] = str(failure)
            context["failure_type"] = type(failure).__name__
        return template.render(context)
