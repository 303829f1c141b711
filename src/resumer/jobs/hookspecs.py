# src/resumer/jobs/hookspecs.py
"""pluggy hook specifications for job discovery.

Packages expose their job types by implementing ``resumer_get_jobs``:

    from resumer.jobs.hookspecs import hookimpl

    class ProductJobs:
        @hookimpl
        def resumer_get_jobs(self):
            return [BackfillProductsJob, ReindexProductsJob]

    registry.register_plugin(ProductJobs())
"""

import pluggy

PROJECT_NAME = "resumer"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ResumerJobSpec:
    """Hook specifications for job providers."""

    @hookspec
    def resumer_get_jobs(self) -> list[type]:  # type: ignore[empty-body]
        """Return job classes (not instances)."""
