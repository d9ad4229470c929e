"""
Visual logging utilities for debugging strip type detection.
"""

import cv2
import numpy as np
import logging
import json
import re
from typing import Dict, Optional
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class VisualLogger:
    """Collects trace steps and writes them (images plus log.json) to disk."""

    def __init__(self, output_dir: Optional[str] = None):
        """
        Initialize visual logger.

        Args:
            output_dir: Base directory for saving logs. If None, uses experiments/strip_type/
        """
        self.output_dir = output_dir or 'experiments/strip_type'
        self.steps = []
        self.run_name = None
        self.image_name = None

    def start_log(self, run_name: str, image_name: str):
        """Start a new visual log for one detection run."""
        self.run_name = run_name
        self.image_name = image_name
        self.steps = []

    def log_dir(self) -> Optional[Path]:
        if not self.run_name or not self.image_name:
            return None
        # Timestamped run names are used as-is, file names lose their extension
        if re.search(r'_\d{8}_\d{6}', self.image_name):
            image_base = self.image_name
        else:
            image_base = Path(self.image_name).stem
        return Path(self.output_dir) / image_base / self.run_name

    def add_step(
        self,
        step_name: str,
        description: str,
        image: Optional[np.ndarray] = None,
        data: Optional[Dict] = None
    ):
        """
        Add a step to the log.

        Args:
            step_name: Name of the step (used in filename)
            description: Human-readable description
            image: Optional annotated image (BGR) for this step
            data: Additional debug data (thresholds, counts, scores)
        """
        self.steps.append({
            'step_name': step_name,
            'description': description,
            'image': image.copy() if image is not None else None,
            'data': data or {}
        })

    def save_log(self, final_visualization: Optional[np.ndarray] = None) -> str:
        """
        Save visual log to disk.

        Args:
            final_visualization: Optional final annotated image

        Returns:
            Path to saved log directory, or '' when the log was never started
        """
        log_dir = self.log_dir()
        if log_dir is None:
            logger.warning('Cannot save log: run_name or image_name not set')
            return ''
        log_dir.mkdir(parents=True, exist_ok=True)

        step_entries = []
        for idx, step in enumerate(self.steps):
            image_file = None
            if step['image'] is not None:
                image_file = f'step_{idx:02d}_{step["step_name"]}.jpg'
                cv2.imwrite(str(log_dir / image_file), step['image'])
            step_entries.append({
                'step_name': step['step_name'],
                'description': step['description'],
                'image_file': image_file,
                'data': step['data']
            })

        final_image = None
        if final_visualization is not None:
            final_image = 'final_result.jpg'
            cv2.imwrite(str(log_dir / final_image), final_visualization)

        metadata = {
            'run_name': self.run_name,
            'image_name': self.image_name,
            'timestamp': datetime.now().isoformat(),
            'steps': step_entries,
            'final_image': final_image
        }

        with open(log_dir / 'log.json', 'w') as f:
            json.dump(metadata, f, indent=2)

        logger.info(f'Visual log saved to: {log_dir}')
        return str(log_dir)
