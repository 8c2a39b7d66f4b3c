from worksafe.cli import analyze_main, format_view
from worksafe.schemas.safety import AnalysisResult, Risk
from worksafe.services.renderer import render_result


def test_format_view_lists_risks_with_badges():
    view = render_result(
        AnalysisResult(
            risks=[Risk(title="Frayed cable", level="medium", recommendation="Replace cable")]
        )
    )

    text = format_view(view)

    assert "Found 1 potential safety risk" in text
    assert "1. [MEDIUM RISK] Frayed cable" in text
    assert "Replace cable" in text


def test_format_view_empty_result():
    text = format_view(render_result(AnalysisResult(risks=[])))

    assert "No risks detected" in text
    assert "high:" not in text


def test_analyze_rejects_unsupported_file(tmp_path, capsys):
    path = tmp_path / "notes.txt"
    path.write_text("not a photo")

    exit_code = analyze_main([str(path), "--relay-url", "http://relay.invalid"])

    assert exit_code == 1
    assert "JPEG, PNG, or WebP" in capsys.readouterr().err
