"""
Background job types for fdspec IR.
"""

from __future__ import annotations

from pydantic import Field

from .base import SPEC_MODEL_CONFIG, SpecModel

DEFAULT_QUEUE = "default"


class RetryPolicy(SpecModel):
    attempts: int | None = None
    backoff: str | None = None  # fixed, exponential
    delay: int | None = None

    model_config = SPEC_MODEL_CONFIG


class JobRateLimit(SpecModel):
    max: int | None = None
    duration: int | None = None

    model_config = SPEC_MODEL_CONFIG


class JobHooks(SpecModel):
    on_complete: str | None = None
    on_failure: str | None = None

    model_config = SPEC_MODEL_CONFIG


class JobSpec(SpecModel):
    """
    Specification for a background job.

    Attributes:
        queue: Queue name; ``default`` needs no declaration
        triggers: Actions whose completion enqueues this job
        dead_letter_queue: Queue receiving jobs that exhausted their retries
    """

    name: str | None = None
    description: str | None = None
    queue: str | None = None
    input: dict[str, dict[str, object]] = Field(default_factory=dict)
    retry: RetryPolicy | None = None
    timeout: int | None = None
    concurrency: int | None = None
    rate_limit: JobRateLimit | None = None
    cron: str | None = None
    triggers: list[str] = Field(default_factory=list)
    dead_letter_queue: str | None = None
    hooks: JobHooks | None = None

    model_config = SPEC_MODEL_CONFIG


class QueueSpec(SpecModel):
    name: str | None = None
    concurrency: int | None = None
    priority: int | None = None
    rate_limit: JobRateLimit | None = None

    model_config = SPEC_MODEL_CONFIG


class JobsSpec(SpecModel):
    jobs: dict[str, JobSpec] = Field(default_factory=dict)
    queues: dict[str, QueueSpec] = Field(default_factory=dict)

    model_config = SPEC_MODEL_CONFIG
