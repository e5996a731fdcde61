from mathrace.speech import InputSource, KeypadBuffer


def _type(buffer: KeypadBuffer, keys, timestamp=0.0):
    result = None
    for key in keys:
        result = buffer.press(key, timestamp)
    return result


def test_digits_then_enter_submit():
    candidate = _type(KeypadBuffer(), ["4", "2", "Enter"], timestamp=1500.0)
    assert candidate.value == 42
    assert candidate.source is InputSource.KEYBOARD
    assert candidate.timestamp == 1500.0


def test_backspace_edits():
    candidate = _type(KeypadBuffer(), ["4", "3", "Backspace", "2", "Enter"])
    assert candidate.value == 42


def test_enter_on_empty_buffer_does_nothing():
    buffer = KeypadBuffer()
    assert buffer.press("Enter", 0.0) is None
    assert buffer.press("Backspace", 0.0) is None


def test_max_digits_and_other_keys():
    buffer = KeypadBuffer(max_digits=3)
    _type(buffer, ["1", "2", "3", "4", "a", "Shift"])
    assert buffer.text == "123"


def test_buffer_clears_after_submit():
    buffer = KeypadBuffer()
    _type(buffer, ["9", "Enter"])
    assert buffer.text == ""


def test_non_ascii_digits_are_ignored():
    buffer = KeypadBuffer()
    assert _type(buffer, ["²", "٣", "Enter"]) is None
    assert buffer.text == ""
    assert _type(buffer, ["4", "²", "Enter"]).value == 4
