"""Class decorators marking components for inclusion in the sitemap.

The decorators only attach metadata; the build step reads them from source
with :mod:`sitemap_codegen.inspector` and never imports the decorated code.

Example::

    import sitemap_codegen.annotations
    from sitemap_codegen.annotations import ChangeFreq, sitemap_url

    @sitemap_codegen.annotations.route("/products/{id}")
    @sitemap_url(ChangeFreq.WEEKLY, 0.8)
    class ProductPage:
        ...
"""

from enum import IntEnum

ROUTE_ANNOTATION = "sitemap_codegen.annotations.route"
SITEMAP_ANNOTATION = "sitemap_codegen.annotations.sitemap_url"
CHANGE_FREQ_ENUM = "sitemap_codegen.annotations.ChangeFreq"

# Names the top-level package re-exports from this module
REEXPORTED_NAMES = {
    "sitemap_codegen.route": ROUTE_ANNOTATION,
    "sitemap_codegen.sitemap_url": SITEMAP_ANNOTATION,
    "sitemap_codegen.ChangeFreq": CHANGE_FREQ_ENUM,
}


class ChangeFreq(IntEnum):
    """Change frequency ordinals accepted by :func:`sitemap_url`."""
    ALWAYS = 0
    HOURLY = 1
    DAILY = 2
    WEEKLY = 3
    MONTHLY = 4
    YEARLY = 5
    NEVER = 6


def route(template):
    """Declare the URL path template a component class handles."""
    if not isinstance(template, str):
        raise TypeError(f"route template must be a string, got {type(template).__name__}")

    def decorator(cls):
        cls.__route__ = template
        return cls

    return decorator


def sitemap_url(change_freq=ChangeFreq.ALWAYS, priority=0.5):
    """Declare sitemap metadata for a routed component class.

    May be applied bare (``@sitemap_url``) to use the defaults.
    """
    if isinstance(change_freq, type):
        return sitemap_url()(change_freq)

    def decorator(cls):
        cls.__sitemap_url__ = (change_freq, priority)
        return cls

    return decorator
