from tablekit.services.diagnostics import (
    EXTRACTION,
    PIPELINE,
    DiagnosticEvent,
    DiagnosticsCollector,
    report,
)


def _event(kind=EXTRACTION, column="amount", strategy="rendered"):
    return DiagnosticEvent.from_exception(kind, ValueError("bad"), column_key=column, strategy=strategy)


def test_collector_counts_and_groups():
    diag = DiagnosticsCollector()
    diag(_event())
    diag(_event())
    diag(_event(kind=PIPELINE, column=None, strategy="process"))
    assert diag.count() == 3
    assert diag.count(EXTRACTION) == 2
    groups = diag.groups()
    assert [g.key for g in groups] == ["extraction|amount|rendered", "pipeline|-|process"]
    assert groups[0].count == 2
    assert groups[0].first.exc_type == "ValueError"


def test_ring_buffer_bounded_but_counts_are_not():
    diag = DiagnosticsCollector(capacity=2)
    for _ in range(5):
        diag(_event())
    assert len(diag.recent()) == 2
    assert diag.count(EXTRACTION) == 5
    diag.clear()
    assert diag.count() == 0
    assert diag.groups() == []


def test_report_ignores_failing_sink():
    def sink(_event):
        raise RuntimeError("sink down")

    report(sink, _event())  # must not raise
    report(None, _event())
