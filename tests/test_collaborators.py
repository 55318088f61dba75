import json

from skyfighter.collaborators import ArcadeAudio, AudioEvent, HighScoreStore


def test_missing_file_loads_zero(tmp_path):
    store = HighScoreStore(str(tmp_path / "missing.json"))
    assert store.load() == 0


def test_corrupt_file_loads_zero(tmp_path):
    path = tmp_path / "hs.json"
    path.write_text("{not json")
    assert HighScoreStore(str(path)).load() == 0


def test_save_then_load(tmp_path):
    path = tmp_path / "hs.json"
    store = HighScoreStore(str(path))
    store.save(420)
    assert json.loads(path.read_text()) == {"high_score": 420}
    assert HighScoreStore(str(path)).load() == 420


def test_save_to_unwritable_path_is_logged(tmp_path, caplog):
    store = HighScoreStore(str(tmp_path / "no" / "such" / "dir.json"))
    store.save(5)
    assert "Could not save high score" in caplog.text


def test_muted_audio_plays_nothing():
    audio = ArcadeAudio()
    assert audio.toggle_mute()
    audio.play(AudioEvent.SHOT_FIRED)
    assert audio._cache == {}


def test_unmapped_event_is_ignored():
    audio = ArcadeAudio()
    audio.play("not_a_sound")
    assert audio._cache == {}
