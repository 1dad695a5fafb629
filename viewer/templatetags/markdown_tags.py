# viewer/templatetags/markdown_tags.py

from asgiref.sync import async_to_sync
from django import template
from django.contrib import messages
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from viewer.markdown.renderer import render_markdown, required_assets
from viewer.markdown.session import RenderSession

register = template.Library()

# Asset markup already written into the page being rendered
_EMITTED_ASSETS_KEY = "viewer.markdown_assets"


def _render(value, context=None):
    return async_to_sync(render_markdown)(value or "", context or {})


def _emit_assets(assets, context=None):
    """
    Markup for ``assets`` that has not been written into this page yet.

    Without a template context (filters) there is no page state to consult
    and every asset is written.
    """
    if context is None:
        return "".join(assets)

    emitted = context.render_context.setdefault(_EMITTED_ASSETS_KEY, set())
    fresh = [asset for asset in assets if asset not in emitted]
    emitted.update(fresh)
    return "".join(fresh)


def _processor_context(context, ext=None, readme=False, path=None, encoding=None, storage_root=None):
    request = context.get("request")

    def notify(message):
        if request is not None:
            messages.warning(request, message, fail_silently=True)

    return {
        "ext": ext,
        "readme": readme,
        "path": path or (request.path if request is not None else "/"),
        "encoding": encoding,
        "storage_root": storage_root,
        "notify": notify,
    }


@register.filter(name="markdown")
def markdown_filter(value):
    result = _render(value)
    return mark_safe(_emit_assets(result.assets) + result.html)


@register.filter(name="markdown_source")
def markdown_source_filter(value, ext):
    """Render any text file; non-markdown extensions show as a code block"""
    result = _render(value, {"ext": ext})
    return mark_safe(_emit_assets(result.assets) + result.html)


@register.simple_tag(takes_context=True)
def markdown_with_context(context, value, ext=None, readme=False, path=None, encoding=None, storage_root=None):
    """Template tag that passes template context to processors"""
    processor_context = _processor_context(context, ext, readme, path, encoding, storage_root)
    result = _render(value, processor_context)
    return mark_safe(_emit_assets(result.assets, context) + result.html)


@register.simple_tag(takes_context=True)
def markdown_assets(context, value, ext=None, encoding=None):
    """
    Head markup the document in ``value`` needs, for use in ``<head>``.

    Assets written here are skipped by the content tags later in the same
    page, so the tag can sit anywhere before them.
    """
    processor_context = _processor_context(context, ext=ext, encoding=encoding)
    assets = async_to_sync(required_assets)(value or "", processor_context)
    return mark_safe(_emit_assets(assets, context))


@register.simple_tag(takes_context=True)
def markdown_view(context, value, ext=None, theme="light", path=None, encoding=None, storage_root=None):
    """
    The mounted view: highlighted content inside ``.markdown-body`` followed
    by the diagram initialization for ``theme`` when the document has diagrams.
    """
    processor_context = _processor_context(context, ext, False, path, encoding, storage_root)
    session = RenderSession(processor_context)
    async_to_sync(session.update)(value or "", theme)

    scripts = "".join(format_html("<script>{}</script>", mark_safe(script)) for script in session.scripts)
    return mark_safe(_emit_assets(session.assets, context) + session.mounted_html() + scripts)
