import io

from rich.console import Console

from chataide.models import ExtractionDiagnostics, InjectionAttempt, InjectionStrategy, ReplySet
from chataide.terminal import render_attempts, render_extraction, render_replies, shorten


def render(renderable) -> str:
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


def test_shorten():
    assert shorten("a   b\n c") == "a b c"
    assert shorten("x" * 10, 4) == "xxxx …"
    assert shorten(None) == ""


def test_render_extraction_shows_counts_and_samples():
    diagnostics = ExtractionDiagnostics(
        site="whatsapp",
        url="https://web.whatsapp.com/",
        chain_used="generic",
        fell_back=True,
        chain_counts={"whatsapp": 0, "messenger": 0, "generic": 4},
        message_count=2,
        sample=["[brackets] stay literal", "hi"],
    )
    out = render(render_extraction(diagnostics))
    assert "generic ←" in out
    assert "[brackets] stay literal" in out
    assert "generischer Fallback" in out


def test_render_attempts_and_replies():
    out = render(render_attempts([
        InjectionAttempt(InjectionStrategy.NATIVE_INSERT, False, "", "boom", "insertText meldete false"),
        InjectionAttempt(InjectionStrategy.CONTENT_REPLACE, True, "ok", None, "text_content"),
    ]))
    assert "native_insert" in out
    assert "boom" in out

    out = render(render_replies(ReplySet("one [x]", "two", "three")))
    assert "one [x]" in out
