import os

from hypothesis import HealthCheck, settings

# Subprocess coverage when run under `coverage run --parallel-mode`
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

settings.register_profile("default", max_examples=100)
settings.register_profile(
    "ci",
    max_examples=500,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("NOVA_HYPOTHESIS_PROFILE", "default"))
