"""Narrator serialization and the cloud TTS client."""

import asyncio
import base64

import pytest
import requests

from voice.tts_feedback import CloudTTS, Narrator, TTSError
from conftest import FakeHTTP, FakeResponse, FakeSynthesizer


def run(coro):
    return asyncio.run(coro)


def test_back_to_back_say_speaks_only_the_last():
    async def scenario():
        synth = FakeSynthesizer()
        narrator = Narrator(synth, cancel_delay=0.01)
        narrator.say(lambda: "A", "en-US")
        narrator.say(lambda: "B", "en-US")
        await narrator.task
        await asyncio.sleep(0.02)
        return synth

    synth = run(scenario())
    assert synth.texts == ["B"]


def test_cancel_precedes_the_next_speak():
    async def scenario():
        synth = FakeSynthesizer()
        narrator = Narrator(synth, cancel_delay=0)
        await narrator.say(lambda: "A", "en-US")
        synth.play()
        assert narrator.busy
        task = narrator.say(lambda: "B", "en-US")
        # cancel is issued immediately, the new speak only after the delay
        assert synth.log == [("speak", "A"), ("cancel",)]
        await task
        return synth

    synth = run(scenario())
    assert synth.log == [("speak", "A"), ("cancel",), ("speak", "B")]


def test_text_is_resolved_when_the_speak_is_issued():
    async def scenario():
        synth = FakeSynthesizer()
        narrator = Narrator(synth, cancel_delay=0.01)
        latest = {"text": "old step"}
        task = narrator.say(lambda: latest["text"], "en-US")
        latest["text"] = "new step"
        await task
        return synth

    assert run(scenario()).texts == ["new step"]


def test_nothing_to_speak_issues_nothing():
    async def scenario():
        synth = FakeSynthesizer()
        narrator = Narrator(synth, cancel_delay=0)
        result = await narrator.say(lambda: None, "en-US")
        return synth, result

    synth, result = run(scenario())
    assert result is None
    assert synth.log == []


def test_utterance_ids_and_current_tracking():
    async def scenario():
        synth = FakeSynthesizer()
        narrator = Narrator(synth, cancel_delay=0)
        first = await narrator.say(lambda: "A", "en-US")
        second = await narrator.say(lambda: "B", "hi-IN", rate=0.9)
        return narrator, first, second

    narrator, first, second = run(scenario())
    assert (first.id, second.id) == (1, 2)
    assert narrator.is_current(2) and not narrator.is_current(1)
    assert second.to_message() == {
        "type": "speak", "id": 2, "text": "B", "language": "hi-IN",
        "rate": 0.9, "audio_base64": None,
    }


def test_server_mode_attaches_audio():
    class StubTTS:
        enabled = True

        def synthesize_base64(self, text, language, rate):
            return f"audio:{text}:{language}"

    async def scenario():
        synth = FakeSynthesizer()
        narrator = Narrator(synth, cancel_delay=0, tts=StubTTS())
        return await narrator.say(lambda: "A", "ta-IN")

    assert run(scenario()).audio_base64 == "audio:A:ta-IN"


# --- CloudTTS ---

def test_cloud_tts_request_and_decode():
    audio = b"ID3fake-mp3"
    http = FakeHTTP(FakeResponse(payload={"audioContent": base64.b64encode(audio).decode()}))
    tts = CloudTTS(api_key="k", session=http)
    assert tts.synthesize("Stir well", "hi-IN", rate=1.2) == audio

    url, kwargs = http.calls[0]
    assert url.endswith("text:synthesize")
    assert kwargs["params"] == {"key": "k"}
    assert kwargs["json"]["input"] == {"text": "Stir well"}
    assert kwargs["json"]["voice"] == {"languageCode": "hi-IN"}
    assert kwargs["json"]["audioConfig"]["speakingRate"] == 1.2
    assert kwargs["json"]["audioConfig"]["audioEncoding"] == "MP3"


@pytest.mark.parametrize("http", [
    FakeHTTP(FakeResponse(status_code=403, text="forbidden")),
    FakeHTTP(FakeResponse(payload={"unexpected": True})),
    FakeHTTP(FakeResponse(payload=None)),
    FakeHTTP(error=requests.ConnectionError("down")),
])
def test_cloud_tts_failures_raise(http):
    tts = CloudTTS(api_key="k", session=http)
    with pytest.raises(TTSError):
        tts.synthesize("x", "en-US")
    assert tts.synthesize_base64("x", "en-US") is None


def test_cloud_tts_disabled_without_key():
    tts = CloudTTS(api_key="", session=FakeHTTP())
    assert not tts.enabled
    with pytest.raises(TTSError):
        tts.synthesize("x", "en-US")
