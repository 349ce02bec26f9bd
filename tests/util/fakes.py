from __future__ import annotations

from pingback.core.samples import DROP, Sample


class FakeProber:
    """Replays a fixed sequence of samples, then keeps returning the last one."""

    def __init__(self, samples: list[Sample]) -> None:
        self.samples = list(samples)
        self.calls = 0

    def probe(self) -> Sample:
        self.calls += 1
        if len(self.samples) > 1:
            return self.samples.pop(0)
        return self.samples[0] if self.samples else DROP


class DummyWidget:
    def __init__(self) -> None:
        self.value: object = ""

    def update(self, message: object) -> None:
        self.value = message
