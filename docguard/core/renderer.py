import os
import json
import logging
from typing import Dict, Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound

from .errors import RenderError

logger = logging.getLogger("docguard.renderer")

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")
DEFAULT_TEMPLATE = os.path.join(TEMPLATE_DIR, "code_comment_prompt.j2")


class PromptRenderer:
    """
    Renders a prompt template from a PromptRecord file.
    StrictUndefined: a template that references a field the record lacks fails
    loudly instead of rendering an empty string into the prompt.
    """

    def check_template(self, template_path: str) -> str:
        if not os.path.isfile(template_path):
            raise RenderError(f"Template file not found: {template_path}")
        return os.path.abspath(template_path)

    def render(self, template_path: str, record_path: str) -> str:
        template_path = self.check_template(template_path)
        context = self._load_record(record_path)

        env = Environment(
            loader=FileSystemLoader(os.path.dirname(template_path)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False
        )
        try:
            template = env.get_template(os.path.basename(template_path))
            rendered = template.render(**context)
        except TemplateNotFound as e:
            raise RenderError(f"Template file not found: {e.name}")
        except TemplateError as e:
            raise RenderError(f"Template render failed: {e}")

        logger.info(f"Rendered {os.path.basename(template_path)} ({len(rendered)} chars)")
        return rendered

    @staticmethod
    def _load_record(record_path: str) -> Dict[str, Any]:
        try:
            with open(record_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise RenderError(f"Prompt record unreadable: {e.strerror or e}")
        except json.JSONDecodeError as e:
            raise RenderError(f"Prompt record is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise RenderError("Prompt record must be a JSON object")
        return data
