"""Template rendering with a fixed set of formatting functions."""
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import quote
import logging
import re

from jinja2 import Environment

from promconv import formatting

logger = logging.getLogger(__name__)

TemplateFunctions = Mapping[str, Callable[..., Any]]

_BASE_FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "escape": lambda s: quote(str(s), safe=""),
    "unescaped": lambda s: str(s),
    "urlconvert": lambda s: quote(str(s), safe=":/?&=#%"),
    "toUpper": lambda s: str(s).upper(),
    "toLower": lambda s: str(s).lower(),
    "contains": lambda s, sub: sub in s,
    "match": lambda pattern, s: re.search(pattern, s) is not None,
    "reReplaceAll": formatting.re_replace_all,
    "humanize": formatting.humanize,
    "humanize1024": formatting.humanize1024,
    "humanizeDuration": formatting.humanize_duration,
    "humanizeDurationInterface": formatting.humanize_duration,
    "humanizePercentage": formatting.humanize_percentage,
    "humanizePercentageH": formatting.humanize_percentage_h,
    "readableValue": formatting.readable_value,
    "add": formatting.add,
    "sub": formatting.sub,
    "mul": formatting.mul,
    "div": formatting.div,
    "now": formatting.now,
    "toString": formatting.to_string,
    "formatDecimal": formatting.format_decimal,
    "timeformat": formatting.timeformat,
    "timestamp": formatting.timestamp,
    "args": formatting.args,
}


def build_function_registry(
    extra: Optional[Mapping[str, Callable[..., Any]]] = None
) -> TemplateFunctions:
    """
    Build the read-only name -> callable map available inside templates.

    Build it once at start-up and hand it to ``TemplateRenderer``.
    ``extra`` entries override the built-ins of the same name.
    """
    functions = dict(_BASE_FUNCTIONS)
    if extra:
        functions.update(extra)
    return MappingProxyType(functions)


class TemplateRenderer:
    """Renders template strings, falling back to the raw text on failure."""

    def __init__(self, functions: TemplateFunctions, templates: Optional[Mapping[str, str]] = None):
        self.functions = functions
        self.templates: Mapping[str, str] = MappingProxyType(dict(templates or {}))
        self.env = Environment(autoescape=False, keep_trailing_newline=True)
        self.env.globals.update(functions)
        self.env.filters.update(functions)

    def render(self, name: str, template_text: str, data: Any = None) -> str:
        """
        Substitute ``data`` into ``template_text``.

        Mapping data is exposed as top-level variables; anything else is
        available as ``data``. Parse or execution errors are logged and the
        original ``template_text`` is returned.
        """
        if isinstance(data, Mapping):
            context = dict(data)
        else:
            context = {"data": data}

        try:
            template = self.env.from_string(template_text)
        except Exception as e:
            logger.warning(f"parse template '{name}' error: {e}")
            return template_text

        try:
            return template.render(context)
        except Exception as e:
            logger.warning(f"execute template '{name}' error: {e}")
            return template_text

    def render_named(self, name: str, data: Any = None) -> str:
        """Render a configured template; raises KeyError for unknown names."""
        return self.render(name, self.templates[name], data)
