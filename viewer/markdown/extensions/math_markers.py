# viewer/markdown/extensions/math_markers.py
"""
Dollar-math syntax for markdown-it, rendered as sanitizer-friendly markers.

    $x^2$              → <code class="math-inline">x^2</code>
    $$\\sum x$$ (block) → <pre><code class="math-display">\\sum x</code></pre>

The marker classes are the only math markup the sanitizer allows; the math
renderer postprocessor turns them into typesetter input afterwards.
"""

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from mdit_py_plugins.dollarmath import dollarmath_plugin


def _render_inline(self, tokens, idx, options, env):
    return f'<code class="math-inline">{escapeHtml(tokens[idx].content)}</code>'


def _render_inline_display(self, tokens, idx, options, env):
    return f'<code class="math-display">{escapeHtml(tokens[idx].content)}</code>'


def _render_block(self, tokens, idx, options, env):
    return f'<pre><code class="math-display">{escapeHtml(tokens[idx].content.strip())}</code></pre>\n'


def math_markers_plugin(md: MarkdownIt) -> None:
    md.use(dollarmath_plugin, double_inline=True)
    md.add_render_rule("math_inline", _render_inline)
    md.add_render_rule("math_inline_double", _render_inline_display)
    md.add_render_rule("math_block", _render_block)
    # Equation labels are not rendered
    md.add_render_rule("math_block_label", _render_block)
