from doc_assistant.query.segmenter import segment_sections


def test_split_on_blank_lines():
    sections = segment_sections("First para.\n\nSecond para\nstill second.\n\n\nThird.")
    assert [s.text for s in sections] == ["First para.", "Second para\nstill second.", "Third."]
    assert [s.index for s in sections] == [0, 1, 2]
    assert all(s.score == 0 for s in sections)


def test_whitespace_only_lines_count_as_blank():
    sections = segment_sections("alpha\n  \t\nbeta\n \n \ngamma")
    assert [s.text for s in sections] == ["alpha", "beta", "gamma"]


def test_empty_sections_dropped_and_indices_contiguous():
    sections = segment_sections("\n\n\nalpha\n\n\n\n\nbeta\n\n")
    assert [(s.index, s.text) for s in sections] == [(0, "alpha"), (1, "beta")]


def test_no_blank_lines_single_section():
    sections = segment_sections("line one\nline two\nline three")
    assert len(sections) == 1
    assert sections[0].text == "line one\nline two\nline three"


def test_windows_line_endings():
    sections = segment_sections("alpha\r\n\r\nbeta")
    assert [s.text for s in sections] == ["alpha", "beta"]


def test_empty_text():
    assert segment_sections("") == []
