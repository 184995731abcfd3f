# ============================================================
# Publishing
# ------------------------------------------------------------
# Runs the external publishing CLI against a saved markdown file
# in a background worker. Each submission gets a job whose future
# carries the PublishResult; the subprocess itself is bounded by
# the configured timeout so a job always finishes.
# ============================================================

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional

from contentgen.errors import PublishFailure
from contentgen.storage import MarkdownStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishResult:
    success: bool
    message: str
    stdout: str = ""
    stderr: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PublishJob:
    job_id: str
    filename: str
    future: "Future[PublishResult]"

    @property
    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> PublishResult:
        return self.future.result(timeout=timeout)


def build_command(template: str, path: Path) -> List[str]:
    """Split the command template and fill `{path}` in each argument."""
    return [part.replace("{path}", str(path)) for part in shlex.split(template)]


def run_publish_command(cmd: List[str], env: Dict[str, str], timeout: float) -> PublishResult:
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, env=env)
    except subprocess.TimeoutExpired as e:
        return PublishResult(
            success=False,
            message=f"发布超时（{timeout:.0f}s）",
            stdout=_text(e.stdout),
            stderr=_text(e.stderr),
        )
    except OSError as e:
        return PublishResult(success=False, message=f"发布命令执行失败: {e}")

    if proc.returncode != 0:
        return PublishResult(
            success=False,
            message=f"发布失败（exit {proc.returncode}）",
            stdout=proc.stdout,
            stderr=proc.stderr,
        )
    return PublishResult(success=True, message="发布成功", stdout=proc.stdout, stderr=proc.stderr)


class Publisher:
    def __init__(
        self,
        store: MarkdownStore,
        command: str,
        timeout: float = 120.0,
        max_workers: int = 2,
        max_jobs: int = 100,
    ):
        self.store = store
        self.command = command
        self.timeout = timeout
        self.max_jobs = max_jobs
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="publish")
        self._jobs: Dict[str, PublishJob] = {}
        self._lock = threading.Lock()

    def submit(self, filename: str, app_id: str, app_secret: str) -> PublishJob:
        if not app_id or not app_secret:
            raise PublishFailure("appId 和 appSecret 不能为空")
        path = self.store.resolve(filename)
        cmd = build_command(self.command, path)
        if not cmd:
            raise PublishFailure("发布命令未配置（PUBLISH_COMMAND）", status_code=500)

        env = {**os.environ, "WECHAT_APP_ID": app_id, "WECHAT_APP_SECRET": app_secret}
        job_id = uuid.uuid4().hex
        logger.info("Publishing %s (job %s): %s", filename, job_id, cmd[0])

        future = self._executor.submit(self._run, job_id, cmd, env)
        job = PublishJob(job_id=job_id, filename=filename, future=future)
        with self._lock:
            self._jobs[job_id] = job
            self._evict_finished()
        return job

    def _evict_finished(self):
        """Drop the oldest finished jobs once the table exceeds `max_jobs`. Caller holds the lock."""
        excess = len(self._jobs) - self.max_jobs
        if excess <= 0:
            return
        for job_id in [jid for jid, job in self._jobs.items() if job.done][:excess]:
            del self._jobs[job_id]

    def _run(self, job_id: str, cmd: List[str], env: Dict[str, str]) -> PublishResult:
        result = run_publish_command(cmd, env, self.timeout)
        if result.success:
            logger.info("Publish job %s succeeded", job_id)
        else:
            logger.warning("Publish job %s failed: %s %s", job_id, result.message, result.stderr.strip()[:500])
        return result

    def get(self, job_id: str) -> Optional[PublishJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def shutdown(self):
        self._executor.shutdown(wait=False)


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
