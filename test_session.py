"""Unit tests for the per-session frame pipeline and its camera host."""

import numpy as np

from agro_brain.config import CORRECTED_MARKER, NO_ACTION
from agro_brain.debug_sink import DebugInfo, DebugSink
from agro_brain.session import FrameSession
from domain.models import ColorHint, DominantColor, RawPrediction
from ui.camera_loop import CameraLoop, KEY_DEBUG, KEY_ESC, KEY_STOP
from ui.overlay_renderer import OverlayRenderer


def _red_frame():
    frame = np.zeros((120, 160, 3), dtype=np.uint8)
    frame[:, :] = (60, 80, 220)  # BGR
    return frame


def _classify_as(label, confidence=0.8):
    def classify(frame):
        return [RawPrediction(label, confidence), RawPrediction("other", 0.1)]
    return classify


def _failing_classify(frame):
    raise RuntimeError("model crashed")


def _started_session(**kwargs):
    s = FrameSession(**kwargs)
    s.start()
    return s


class _FakeClassifier:
    def __init__(self, label):
        self.label = label

    def classify(self, frame):
        return [RawPrediction(self.label, 0.77)]


class _FakeCapture:
    def __init__(self):
        self.released = False

    def release(self):
        self.released = True


def test_tick_before_start_is_ignored():
    """Test a session that was never started does not record frames."""
    s = FrameSession()
    assert s.tick(_red_frame(), _classify_as("Granny Smith")) is None
    assert len(s.stabilizer) == 0
    print("✓ Tick before start test passed")


def test_ticks_reach_stable_corrected_label():
    """Test seven red apple frames settle on a corrected Tomato."""
    session = _started_session()
    frame = _red_frame()
    classify = _classify_as("Granny Smith apple")

    for _ in range(6):
        decision = session.tick(frame, classify)
        assert not decision.is_stable, "Six votes must not be stable"

    decision = session.tick(frame, classify)
    assert decision.is_stable
    assert decision.label == "Tomato"
    assert decision.sub_text == CORRECTED_MARKER
    assert decision.color_hint == ColorHint.CONFIRMED
    assert session.last_sample.dominant == DominantColor.RED
    assert session.last_result.raw_label == "Granny Smith apple"
    print("✓ Stable corrected label test passed")


def test_only_top_prediction_is_used():
    """Test only the first ranked prediction reaches the rules."""
    session = _started_session()
    session.tick(_red_frame(), _classify_as("Bell Pepper"))
    assert session.last_result.raw_label == "Bell Pepper"
    assert session.last_result.display_label == "Pepper"
    print("✓ Top prediction test passed")


def test_not_ready_frame_gives_no_color_evidence():
    """Test a frame that is not ready yields no correction."""
    session = _started_session()
    session.tick(_red_frame(), _classify_as("Granny Smith apple"), ready=False)
    assert session.last_sample.dominant == DominantColor.UNKNOWN
    assert session.last_result.display_label == "Granny Smith apple"
    assert not session.last_result.was_corrected
    print("✓ Not ready frame test passed")


def test_sample_size_changes_sampled_pixels():
    """Test the session samples a region of the configured size."""
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    frame[:, :] = (128, 128, 128)
    frame[45:55, 45:55] = (60, 80, 220)  # small red patch in the center

    wide = _started_session()
    wide.tick(frame, _classify_as("peach"))
    assert wide.last_sample.dominant == DominantColor.NEUTRAL, "Patch is diluted at 50px"
    assert not wide.last_result.was_corrected

    narrow = _started_session(sample_size=10)
    narrow.tick(frame, _classify_as("peach"))
    assert (narrow.last_sample.r, narrow.last_sample.g, narrow.last_sample.b) == (220, 80, 60)
    assert narrow.last_result.display_label == "Tomato"
    print("✓ Sample size test passed")


def test_classifier_failure_skips_tick():
    """Test a classifier error skips the frame and the next frame recovers."""
    session = _started_session()
    session.tick(_red_frame(), _classify_as("Zucchini"))

    assert session.tick(_red_frame(), _failing_classify) is None
    assert len(session.stabilizer) == 1, "Failed frame must not touch history"

    assert session.tick(_red_frame(), _classify_as("Zucchini")) is not None
    assert len(session.stabilizer) == 2
    print("✓ Classifier failure test passed")


def test_empty_predictions_skip_tick():
    """Test empty classifier output skips the frame."""
    session = _started_session()
    assert session.tick(_red_frame(), lambda frame: []) is None
    assert session.tick(_red_frame(), lambda frame: None) is None
    assert len(session.stabilizer) == 0
    print("✓ Empty predictions test passed")


def test_stop_clears_history():
    """Test stop empties history and a restart begins cold."""
    session = _started_session()
    for _ in range(10):
        session.tick(_red_frame(), _classify_as("Granny Smith apple"))
    assert len(session.stabilizer) == 10

    session.stop()
    assert not session.running
    assert len(session.stabilizer) == 0
    assert session.last_decision is None
    assert session.tick(_red_frame(), _classify_as("Granny Smith apple")) is None

    session.start()
    decision = session.tick(_red_frame(), _classify_as("Granny Smith apple"))
    assert not decision.is_stable
    assert len(session.stabilizer) == 1
    print("✓ Stop clears history test passed")


def test_stop_during_classification_discards_frame():
    """Test a frame whose classification outlived the session is dropped."""
    session = _started_session()

    def classify_then_stop(frame):
        session.stop()
        return [RawPrediction("Zucchini", 0.9)]

    assert session.tick(_red_frame(), classify_then_stop) is None
    assert len(session.stabilizer) == 0
    print("✓ Stop during classification test passed")


def test_sessions_are_independent():
    """Test two sessions keep separate histories."""
    a, b = _started_session(), _started_session()
    for _ in range(7):
        a.tick(_red_frame(), _classify_as("peach"))
    assert len(a.stabilizer) == 7
    assert len(b.stabilizer) == 0
    assert not b.stabilizer.vote().is_stable
    print("✓ Independent sessions test passed")


def test_debug_sink_fields():
    """Test the debug sink reports raw label, color and action."""
    sink = DebugSink(enabled=True)
    s = _started_session(debug_sink=sink)

    s.tick(_red_frame(), _classify_as("Granny Smith apple"))
    assert sink.info.raw == "Granny Smith apple"
    assert sink.info.color == "Red (R220 G80 B60)"
    assert sink.info.action == "Correction: red color -> Tomato"

    s.tick(_red_frame(), _classify_as("banana"))
    assert sink.info.raw == "banana"
    assert sink.info.action == NO_ACTION
    print("✓ Debug fields test passed")


def test_disabled_debug_sink_is_untouched():
    """Test a disabled sink keeps its fields until toggled on."""
    sink = DebugSink(enabled=False)
    s = _started_session(debug_sink=sink)
    s.tick(_red_frame(), _classify_as("Granny Smith apple"))
    assert sink.info == DebugInfo()

    assert sink.toggle()
    s.tick(_red_frame(), _classify_as("Granny Smith apple"))
    assert sink.info.raw == "Granny Smith apple"
    print("✓ Disabled debug sink test passed")


def test_debug_sink_does_not_change_decisions():
    """Test decisions are identical with and without a debug sink."""
    plain = _started_session()
    traced = _started_session(debug_sink=DebugSink(enabled=True))

    labels = ["apple", "Zucchini", "apple", "Bell Pepper", "apple"] * 3
    for label in labels:
        d1 = plain.tick(_red_frame(), _classify_as(label))
        d2 = traced.tick(_red_frame(), _classify_as(label))
        assert d1 == d2
    print("✓ Debug isolation test passed")


def test_camera_loop_step_renders_decision():
    """Test a loop step draws on a copy and updates the decision."""
    loop = CameraLoop(_FakeClassifier("Granny Smith apple"), debug=True)
    loop.session.start()

    frame = _red_frame()
    before = frame.copy()
    for _ in range(7):
        out = loop.step(frame)

    assert out.shape == frame.shape
    assert np.array_equal(frame, before), "Rendering must not touch the camera frame"
    assert loop.last_decision.label == "Tomato"
    assert loop.debug_sink.info.raw == "Granny Smith apple"
    print("✓ Camera loop step test passed")


def test_camera_loop_skipped_tick_clears_banner():
    """Test a skipped tick leaves no decision to draw."""
    loop = CameraLoop(_FakeClassifier("peach"))
    loop.session.start()
    loop.step(_red_frame())
    assert loop.last_decision is not None

    loop.classifier.classify = lambda frame: []
    loop.step(_red_frame())
    assert loop.last_decision is None
    print("✓ Skipped tick banner test passed")


def test_camera_loop_stop_and_restart_keys():
    """Test 's' stops then restarts the session while ESC exits."""
    loop = CameraLoop(_FakeClassifier("peach"))
    captures = []

    def open_camera():
        cap = _FakeCapture()
        captures.append(cap)
        return cap

    loop._open_camera = open_camera
    assert loop.start()
    for _ in range(3):
        loop.step(_red_frame())
    assert len(loop.session.stabilizer) == 3

    assert loop.handle_key(KEY_STOP), "Stop must not exit the loop"
    assert not loop.session.running
    assert len(loop.session.stabilizer) == 0
    assert captures[0].released
    assert loop.cap is None

    assert loop.handle_key(KEY_STOP)
    assert loop.session.running
    assert loop.cap is captures[1]
    assert len(loop.session.stabilizer) == 0

    assert loop.handle_key(KEY_DEBUG)
    assert loop.debug_sink.enabled
    assert not loop.handle_key(KEY_ESC)
    print("✓ Stop and restart keys test passed")


def test_camera_loop_restart_failure_stays_stopped():
    """Test a failed camera reopen leaves the session stopped."""
    loop = CameraLoop(_FakeClassifier("peach"))
    loop._open_camera = lambda: None
    assert loop.handle_key(KEY_STOP)
    assert not loop.session.running
    assert loop.idle_frame(320, 240).shape == (240, 320, 3)
    print("✓ Restart failure test passed")


def test_overlay_renderer_handles_tiny_frames():
    """Test rendering on frames smaller than the banner."""
    renderer = OverlayRenderer()
    session = _started_session()
    decision = session.tick(_red_frame(), _classify_as("peach"))

    tiny = np.zeros((20, 20, 3), dtype=np.uint8)
    out = renderer.render(tiny, decision, DebugInfo("peach", "Red (R1 G2 B3)", NO_ACTION))
    assert out.shape == tiny.shape
    assert not tiny.any()
    print("✓ Tiny frame render test passed")


def run_all_tests():
    """Run all tests."""
    print("Running session tests...\n")

    tests = [
        test_tick_before_start_is_ignored,
        test_ticks_reach_stable_corrected_label,
        test_only_top_prediction_is_used,
        test_not_ready_frame_gives_no_color_evidence,
        test_sample_size_changes_sampled_pixels,
        test_classifier_failure_skips_tick,
        test_empty_predictions_skip_tick,
        test_stop_clears_history,
        test_stop_during_classification_discards_frame,
        test_sessions_are_independent,
        test_debug_sink_fields,
        test_disabled_debug_sink_is_untouched,
        test_debug_sink_does_not_change_decisions,
        test_camera_loop_step_renders_decision,
        test_camera_loop_skipped_tick_clears_banner,
        test_camera_loop_stop_and_restart_keys,
        test_camera_loop_restart_failure_stays_stopped,
        test_overlay_renderer_handles_tiny_frames,
    ]

    try:
        for test in tests:
            test()

        print("\n✅ All tests passed!")
        return True
    except AssertionError as e:
        print(f"\n❌ Test failed: {e}")
        return False


if __name__ == "__main__":
    run_all_tests()
