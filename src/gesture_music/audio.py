from __future__ import annotations

import asyncio
import logging
import queue
from typing import Optional

import sounddevice as sd

from .notes import note_to_freq
from .types import Channel
from .voices import EIGHTH_NOTE_MS, REVERB_DECAY_S, REVERB_WET, CombReverb, VoiceBank, create_voice


logger = logging.getLogger(__name__)


class NoteSynth:
    """
    Two-voice note player on a sounddevice output stream.

    Notes on the LEFT channel use a soft triangle lead, RIGHT uses a filtered
    saw. Both share one reverb. Nothing is audible until ``unlock()`` has
    opened the stream.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        volume: float = 0.3,
        note_ms: float = EIGHTH_NOTE_MS,
        reverb_decay_s: float = REVERB_DECAY_S,
        reverb_wet: float = REVERB_WET,
        device: Optional[int] = None,
    ) -> None:
        """
        Args:
            sample_rate: Audio sample rate in Hz
            volume: Master volume (0.0 to 1.0)
            note_ms: Nominal note length before the release tail
            reverb_decay_s: Reverb time to -60 dB; 0 disables the reverb
            reverb_wet: Reverb mix (0.0 to 1.0)
            device: sounddevice output device index (default device if None)
        """
        self.sample_rate = sample_rate
        self.note_ms = note_ms
        self.device = device
        reverb = CombReverb(sample_rate, decay_s=reverb_decay_s, wet=reverb_wet) if reverb_decay_s > 0 else None
        self._bank = VoiceBank(sample_rate, volume=volume, reverb=reverb)
        self._events: "queue.SimpleQueue[tuple[float, Channel]]" = queue.SimpleQueue()
        self._stream: Optional[sd.OutputStream] = None

    @property
    def started(self) -> bool:
        return self._stream is not None

    def start(self) -> None:
        """Open and start the audio stream."""
        if self.started:
            return

        stream = sd.OutputStream(
            samplerate=self.sample_rate,
            channels=1,
            dtype="float32",
            callback=self._audio_callback,
            blocksize=512,
            device=self.device,
        )
        stream.start()
        self._stream = stream
        logger.info("audio stream started (%d Hz)", self.sample_rate)

    def stop(self) -> None:
        """Stop the audio stream."""
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        finally:
            self._stream = None

    close = stop

    async def unlock(self) -> None:
        # Opening the device can block for a while, keep it off the loop.
        await asyncio.to_thread(self.start)

    def trigger(self, note: str, channel: Channel) -> None:
        if not self.started:
            logger.debug("synth not started; dropping %s", note)
            return
        self._events.put((note_to_freq(note), channel))

    def _audio_callback(self, outdata, frames, time_info, status) -> None:
        if status:
            logger.debug("audio stream status: %s", status)

        while True:
            try:
                freq, channel = self._events.get_nowait()
            except queue.Empty:
                break
            self._bank.add(create_voice(freq, channel, self.sample_rate, self.note_ms))

        outdata[:, 0] = self._bank.render(frames)

    def __enter__(self) -> "NoteSynth":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
