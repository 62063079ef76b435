import os
import time

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape

from shared.app_logging.logger import get_logger

logger = get_logger("newsfeed.templates")

TEMPLATE_DIR = os.getenv(
    "NEWSFEED_TEMPLATE_DIR", os.path.join(os.path.dirname(__file__), "templates")
)

logger.debug("Initializing Jinja2 with template directory: %s", TEMPLATE_DIR)

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(["html", "j2"])
)


def get_template(name: str) -> Template:
    logger.debug("Loading template %r", name)
    try:
        return _env.get_template(name)
    except Exception as e:
        logger.exception("Error loading template %r: %s", name, e)
        raise


def render(name: str, **ctx) -> str:
    """
    Load and render the given template with context, logging timing and errors.
    :param name: filename of the template (e.g. 'index.html.j2')
    :param ctx: keyword args for rendering
    :return: rendered string
    """
    start = time.perf_counter()
    try:
        result = get_template(name).render(**ctx)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("Rendered template %r in %.2fms", name, elapsed)
        return result
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        logger.exception("Error rendering template %r after %.2fms: %s", name, elapsed, e)
        raise
