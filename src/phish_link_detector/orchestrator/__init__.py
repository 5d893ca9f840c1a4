"""Link analysis orchestration."""

from phish_link_detector.orchestrator.detector import LinkDetector

__all__ = ["LinkDetector"]
