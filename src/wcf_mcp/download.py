"""Two-phase attachment retrieval.

The remote side starts an attachment transfer when asked and never reports
completion. :class:`AttachmentDownload` triggers the transfer and then
probes for the decrypted file at a fixed interval until a path comes back,
the timeout budget runs out, or another thread cancels the wait.

The first probe happens one interval after the trigger. A timeout of ``N``
seconds at the default 0.5 s interval allows at most ``2 * N`` probes.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING

from .protocol.functions import Function
from .protocol.status import is_success

if TYPE_CHECKING:
    from .client import CmdClient

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.5  # seconds between decrypt probes
DEFAULT_TIMEOUT = 30  # seconds


class DownloadState(Enum):
    PENDING = "pending"
    TRIGGERING = "triggering"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset(
    {DownloadState.SUCCEEDED, DownloadState.FAILED, DownloadState.CANCELLED}
)


class AttachmentDownload:
    """One attachment retrieval, run on the caller's thread.

    Usage::

        job = client.start_image_download(msgid, extra, "C:/tmp")
        path = job.run()   # blocks; "" on failure
        # from another thread: job.cancel()
    """

    def __init__(
        self,
        client: CmdClient,
        msgid: int,
        extra: str,
        dst_dir: str,
        timeout: float = DEFAULT_TIMEOUT,
        thumb: str = "",
        interval: float = POLL_INTERVAL,
    ) -> None:
        if timeout < 0:
            raise ValueError(f"Timeout must be non-negative, got {timeout}")
        if interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval}")
        self._client = client
        self.msgid = msgid
        self.extra = extra
        self.dst_dir = dst_dir
        self.thumb = thumb
        self.timeout = timeout
        self.interval = interval
        self.state = DownloadState.PENDING
        self.path = ""
        self.trigger_status: int | None = None
        self.probes = 0
        self._cancelled = threading.Event()

    @property
    def max_probes(self) -> int:
        return int(round(self.timeout / self.interval))

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def cancel(self) -> None:
        """Stop waiting, or skip the trigger if ``run`` has not started.

        A transfer already triggered on the remote side cannot be aborted.
        """
        self._cancelled.set()

    def run(self) -> str:
        """Trigger the transfer and poll for the decrypted file.

        Returns:
            The saved file path, or an empty string on trigger failure,
            timeout or cancellation (see ``state``).

        Raises:
            RuntimeError: If the download was already run.

        Transport errors propagate; the job is left in ``FAILED``.
        """
        if self.state is not DownloadState.PENDING:
            raise RuntimeError(f"Download already run (state={self.state.value})")

        if self._cancelled.is_set():
            logger.warning("download cancelled before trigger msgid=%s", self.msgid)
            self.state = DownloadState.CANCELLED
            return ""

        try:
            return self._run()
        except BaseException:
            self.state = DownloadState.FAILED
            raise

    def _run(self) -> str:
        self.state = DownloadState.TRIGGERING
        self.trigger_status = self._client.download_attachment(
            self.msgid, self.thumb, self.extra
        )
        if not is_success(Function.DOWNLOAD_ATTACH, self.trigger_status):
            logger.warning(
                "failed to download attachment msgid=%s status=%s",
                self.msgid,
                self.trigger_status,
            )
            self.state = DownloadState.FAILED
            return ""

        self.state = DownloadState.POLLING
        for _ in range(self.max_probes):
            if self._cancelled.wait(self.interval):
                logger.warning("download cancelled msgid=%s", self.msgid)
                self.state = DownloadState.CANCELLED
                return ""
            self.probes += 1
            path = self._client.decrypt_image(self.extra, self.dst_dir)
            logger.debug("probe %d for msgid=%s -> %r", self.probes, self.msgid, path)
            if path:
                self.path = path
                self.state = DownloadState.SUCCEEDED
                return path

        logger.warning(
            "download timeout msgid=%s after %d probes", self.msgid, self.probes
        )
        self.state = DownloadState.FAILED
        return ""
