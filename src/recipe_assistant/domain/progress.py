"""Progress events streamed to clients during long-running requests."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressEvent:
    """A status update; the terminal event has ``done`` set."""

    step: str
    progress: int
    done: bool = False
    payload: dict[str, object] = field(default_factory=dict)
    error: str | None = None

    def to_payload(self) -> dict[str, object]:
        """Return the JSON body sent to the client."""
        body: dict[str, object] = {"step": self.step, "progress": self.progress}
        if self.done:
            body.update(self.payload)
            if self.error is not None:
                body["error"] = self.error
            body["done"] = True
        return body
