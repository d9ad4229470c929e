"""
Debug utilities for the strip type detection service.

Provides the optional trace sink the detector writes intermediate results to.
Tracing is a side channel and never changes a detection result.
"""

import logging
import numpy as np
import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any
from pathlib import Path
from utils.visual_logger import VisualLogger

logger = logging.getLogger(__name__)


@dataclass
class DebugStep:
    """Represents a single debug step in the detection run."""
    step_id: str
    name: str
    description: str
    data: Dict[str, Any] = field(default_factory=dict)
    has_image: bool = False


class DebugContext:
    """
    Collects detection steps and optionally writes them to disk.

    Usage:
        debug = DebugContext(enabled=True, output_dir="experiments/strip_type")
        debug.add_step("03_peak_analysis", "Peak Analysis", data={"peaks": [6, 22]})
        debug.save_log()
    """

    def __init__(
        self,
        enabled: bool = False,
        output_dir: Optional[str] = None,
        image_name: str = "unknown",
        run_tag: Optional[str] = None,
        step_filter: Optional[List[str]] = None,
        track_parameters: bool = True
    ):
        """
        Initialize debug context.

        Args:
            enabled: Whether debug mode is enabled
            output_dir: Directory for saving logs (None keeps the trace in memory only)
            image_name: Name of the image being processed
            run_tag: Optional tag grouping related runs
            step_filter: Optional list of step IDs to record (None = record all)
            track_parameters: Whether to keep the parameters passed with each step
        """
        self.enabled = enabled
        self.image_name = image_name
        self.run_tag = run_tag
        self.step_filter = step_filter
        self.track_parameters = track_parameters
        self.steps: List[DebugStep] = []
        self.parameters_used: Dict[str, Any] = {}
        self.visual_logger: Optional[VisualLogger] = None
        self._log_dir: Optional[Path] = None

        if enabled and output_dir:
            self.visual_logger = VisualLogger(output_dir)
            self.visual_logger.start_log(run_tag or 'strip_type', image_name)
            self._log_dir = self.visual_logger.log_dir()

    def add_step(
        self,
        step_id: str,
        name: str,
        image: Optional[Any] = None,
        data: Optional[Dict[str, Any]] = None,
        description: str = "",
        parameters: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Add a debug step.

        Args:
            step_id: Unique identifier for the step (e.g., "03_peak_analysis")
            name: Human-readable step name
            image: Optional image to log (BGR numpy array)
            data: Optional metadata dictionary
            description: Optional description of the step
            parameters: Optional parameters used in this step
        """
        if not self.enabled:
            return

        if self.step_filter and step_id not in self.step_filter:
            return

        if self.track_parameters and parameters:
            self.parameters_used[step_id] = self._clean_value(parameters)

        clean_data = {}
        if data:
            for key, value in data.items():
                clean_data[key] = self._clean_value(value)

        source_info = self._caller_source(inspect.currentframe())
        if source_info:
            clean_data['_source'] = source_info

        self.steps.append(DebugStep(
            step_id=step_id,
            name=name,
            description=description,
            data=clean_data,
            has_image=image is not None
        ))

        if self.visual_logger:
            self.visual_logger.add_step(step_id, description or name, image, clean_data)

    @staticmethod
    def _caller_source(frame) -> Dict[str, Any]:
        """File (relative to the project root when possible) and line of the first caller outside this module."""
        caller_frame = frame.f_back if frame else None
        while caller_frame is not None and caller_frame.f_code.co_filename == __file__:
            caller_frame = caller_frame.f_back
        if caller_frame is None:
            return {}
        filename = caller_frame.f_code.co_filename
        project_root = Path(__file__).parent.parent.parent
        try:
            source_file = str(Path(filename).relative_to(project_root))
        except ValueError:
            source_file = filename
        return {'source_file': source_file, 'source_line': caller_frame.f_lineno}

    def _clean_value(self, value):
        """Recursively clean a value for JSON serialization."""
        if isinstance(value, Enum):
            return value.value
        if hasattr(value, 'to_dict') and callable(getattr(value, 'to_dict')):
            return self._clean_value(value.to_dict())

        if isinstance(value, np.ndarray):
            return value.tolist() if value.size < 100 else f"<ndarray shape={value.shape}>"
        elif isinstance(value, np.bool_):
            return bool(value)
        elif isinstance(value, np.integer):
            return int(value)
        elif isinstance(value, np.floating):
            return float(value)
        elif isinstance(value, (list, tuple)):
            return [self._clean_value(v) for v in value]
        elif isinstance(value, dict):
            return {k: self._clean_value(v) for k, v in value.items()}
        elif hasattr(value, '__dict__'):
            return {k: self._clean_value(v) for k, v in value.__dict__.items()}
        else:
            return value

    def save_log(self, final_image: Optional[np.ndarray] = None) -> Optional[str]:
        """
        Save the debug log.

        Args:
            final_image: Optional final annotated image

        Returns:
            Path to saved log directory, or None if disabled or in-memory only
        """
        if not self.enabled or not self.visual_logger:
            return None

        try:
            log_path = self.visual_logger.save_log(final_image)
            return log_path or None
        except OSError as e:
            logger.warning(f"Failed to save debug log: {e}", exc_info=True)
            return None

    def get_summary(self) -> Dict[str, Any]:
        """
        Get debug summary as dictionary.

        Returns:
            Dictionary with debug information
        """
        return {
            "enabled": self.enabled,
            "image_name": self.image_name,
            "run_tag": self.run_tag,
            "parameters_used": self.parameters_used,
            "steps": [
                {
                    "step_id": step.step_id,
                    "name": step.name,
                    "description": step.description,
                    "data": step.data,
                    "has_image": step.has_image
                }
                for step in self.steps
            ],
            "step_count": len(self.steps),
            "log_dir": str(self._log_dir) if self._log_dir else None
        }

    def get_step(self, step_id: str) -> Optional[DebugStep]:
        """Most recent step recorded under step_id."""
        for step in reversed(self.steps):
            if step.step_id == step_id:
                return step
        return None

    def is_enabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self.enabled


def trace_step(debug: Optional[DebugContext], *args, **kwargs) -> None:
    """
    Add a step to an optional trace.

    A trace that raises is logged and skipped; the step is lost but the
    caller carries on.
    """
    if debug is None:
        return
    try:
        debug.add_step(*args, **kwargs)
    except Exception as e:
        logger.warning(f"Debug trace step failed: {e}", exc_info=True)
