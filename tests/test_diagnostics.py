from core.diagnostics import DiagnosticLog, MAX_LINES


def test_keeps_only_the_most_recent_lines():
    log = DiagnosticLog()
    for i in range(12):
        log.add(f"line {i}")

    assert len(log) == MAX_LINES
    assert log.lines() == [f"line {i}" for i in range(4, 12)]


def test_lines_are_trimmed_and_blanks_dropped():
    log = DiagnosticLog()
    log.feed(b"  first  \n\n   \n\tsecond\n")
    assert log.lines() == ["first", "second"]


def test_excerpt_is_last_three_joined():
    log = DiagnosticLog()
    log.feed(b"a\nb\nc\nd\n")
    assert log.tail() == ["b", "c", "d"]
    assert log.excerpt() == "b | c | d"


def test_excerpt_with_fewer_lines():
    log = DiagnosticLog()
    log.feed(b"only\n")
    assert log.excerpt() == "only"
    assert DiagnosticLog().excerpt() == ""


def test_line_split_across_chunks():
    log = DiagnosticLog()
    log.feed(b"Conversion fai")
    assert log.lines() == []
    log.feed(b"led!\r\n")
    assert log.lines() == ["Conversion failed!"]


def test_flush_commits_trailing_line():
    log = DiagnosticLog()
    log.feed(b"a\nno newline at end")
    log.flush()
    assert log.lines() == ["a", "no newline at end"]


def test_tail_of_zero():
    log = DiagnosticLog()
    log.add("x")
    assert log.tail(0) == []
