# viewer/markdown/postprocessors/math_renderer.py
"""
Postprocessor that turns sanitized math markers into typesetting markup.

The parser emits math as code elements carrying a marker class, which is all
the sanitizer lets through:

    <code class="math-inline">x^2</code>
    <pre><code class="math-display">\\sum_i x_i</code></pre>

This pass rewrites them into the delimiter form the client-side typesetter
picks up (the same shape Pandoc produces with --mathjax):

    <span class="math inline">\\(x^2\\)</span>
    <span class="math display">\\[\\sum_i x_i\\]</span>

Only runs when the document was detected to contain math.
"""

from .utils import parsed_tree, serialize_tree


def render_math(html: str, context: dict) -> str:
    soup = parsed_tree(html, context)

    for code in soup.find_all("code", class_="math-display"):
        latex = code.get_text().strip()
        span = soup.new_tag("span", attrs={"class": "math display"})
        span.string = f"\\[{latex}\\]"
        # Display math replaces its whole <pre> wrapper
        target = code.parent if code.parent is not None and code.parent.name == "pre" else code
        target.replace_with(span)

    for code in soup.find_all("code", class_="math-inline"):
        latex = code.get_text()
        span = soup.new_tag("span", attrs={"class": "math inline"})
        span.string = f"\\({latex}\\)"
        code.replace_with(span)

    return serialize_tree(context, soup)


def math_renderer_default(html: str, context: dict) -> str:
    """Default instance of math renderer postprocessor"""
    return render_math(html, context)
