"""
Strip type detection service.

Orchestrates: Image → Pixel Buffer → Axis Samples → Signal → Segmenters →
Candidate Evaluation → Classification

Detection is best-effort: every failure is logged and returned as the
degenerate result (0 pads, unknown, confidence 0).
"""

import logging
import numpy as np
from typing import Callable, Dict, Optional, Sequence, Tuple

from config.strip_type_config import get_strip_type_config
from services.strip_type.classifier import calculate_confidence, infer_strip_type
from services.strip_type.errors import DegenerateSignal, ImageDecodeFailure, StripTypeDetectionError
from services.strip_type.evaluator import evaluate_segment_candidate, is_eligible, select_best_candidate
from services.strip_type.axis_sampler import detect_orientation, sample_along_strip_axis
from services.strip_type.models import (
    AxisSample,
    PixelBuffer,
    SegmentCandidate,
    SegmentSource,
    StripTypeDetection
)
from services.strip_type.pixel_buffer import prepare_pixel_buffer
from services.strip_type.segmenters import SEGMENTERS
from services.strip_type.signal_conditioner import ConditionedSignal, condition_signal
from services.utils.debug import DebugContext, trace_step
from utils.detection_visualization import create_final_visualization, rgba_to_bgr, visualize_sample_points
from utils.image_loader import image_name_from_path, load_image

logger = logging.getLogger(__name__)


def check_signal(samples: Sequence[AxisSample]) -> None:
    """
    Raise DegenerateSignal when the samples cannot carry any pad evidence.

    Raises:
        DegenerateSignal: If there are no samples or every sample has the same color
    """
    if not samples:
        raise DegenerateSignal('No samples taken along the strip axis')

    colors = np.array([s.color.as_tuple() for s in samples])
    if np.all(colors == colors[0]):
        raise DegenerateSignal('Sample colors have zero variance')


class StripTypeDetectionService:
    """
    Detects how many pads a test strip has and which product family it is.

    Holds only configuration, so one instance can serve concurrent requests.
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize strip type detection service.

        Args:
            config: Optional overrides for get_strip_type_config() values
        """
        self.config = get_strip_type_config()
        if config:
            self.config.update(config)

    def detect_strip_type(
        self,
        image_path: str,
        debug: Optional[DebugContext] = None
    ) -> StripTypeDetection:
        """
        Detect the strip type of an image at a local path or URL.

        Args:
            image_path: Local file path or HTTP(S) URL
            debug: Optional DebugContext; when omitted and debug tracing is
                configured, a trace is written to the configured output dir

        Returns:
            StripTypeDetection (degenerate on any failure)
        """
        own_trace = debug is None and self.config.get('debug_trace', False)
        if own_trace:
            debug = DebugContext(
                enabled=True,
                output_dir=self.config.get('debug_output_dir'),
                image_name=image_name_from_path(image_path)
            )

        def build_buffer() -> PixelBuffer:
            try:
                image = load_image(image_path, timeout=self.config['download_timeout'])
            except ValueError as e:
                raise ImageDecodeFailure(str(e))
            return prepare_pixel_buffer(image, self.config['max_image_size'])

        result = self._run(lambda: self._analyze(build_buffer(), debug), debug)
        if own_trace:
            self._trace(debug.save_log)
        return result

    def detect_from_image(
        self,
        image: np.ndarray,
        debug: Optional[DebugContext] = None
    ) -> StripTypeDetection:
        """
        Detect the strip type of an already decoded OpenCV image (gray, BGR or BGRA).
        """
        return self._run(
            lambda: self._analyze(prepare_pixel_buffer(image, self.config['max_image_size']), debug),
            debug
        )

    def detect_from_buffer(
        self,
        buffer: PixelBuffer,
        debug: Optional[DebugContext] = None
    ) -> StripTypeDetection:
        """Detect the strip type of an RGBA pixel buffer."""
        return self._run(lambda: self._analyze(buffer, debug), debug)

    def _run(
        self,
        detect: Callable[[], StripTypeDetection],
        debug: Optional[DebugContext]
    ) -> StripTypeDetection:
        try:
            return detect()
        except StripTypeDetectionError as e:
            logger.warning(f'Strip type detection failed ({e.error_code}): {e.message}')
            trace_step(debug, '00_detection_failed', 'Detection Failed', data={
                'error': e.message,
                'error_code': e.error_code
            })
            return StripTypeDetection.degenerate()
        except Exception as e:
            logger.error(f'Unexpected error in strip type detection: {e}', exc_info=True)
            trace_step(debug, '00_detection_failed', 'Detection Failed', data={
                'error': str(e),
                'error_code': 'STRIP_TYPE_DETECTION_FAILED'
            })
            return StripTypeDetection.degenerate()

    def classify_samples(
        self,
        samples: Sequence[AxisSample],
        debug: Optional[DebugContext] = None
    ) -> StripTypeDetection:
        """
        Classify an already sampled strip axis.

        Runs signal conditioning, the three segmenters, candidate evaluation
        and classification. Failures become the degenerate result.
        """
        return self._run(lambda: self._classify(samples, debug)[0], debug)

    def _analyze(self, buffer: PixelBuffer, debug: Optional[DebugContext]) -> StripTypeDetection:
        orientation = detect_orientation(buffer)
        samples = sample_along_strip_axis(
            buffer,
            sample_count=self.config['sample_count'],
            padding_ratio=self.config['padding_ratio'],
            alpha_threshold=self.config['alpha_threshold']
        )

        tracing = debug is not None and debug.is_enabled()
        if tracing:
            self._trace(self._trace_samples, debug, buffer, orientation, samples)

        detection, selected = self._classify(samples, debug)

        if tracing:
            self._trace(self._trace_result, debug, buffer, orientation, selected, detection)
        return detection

    def _classify(
        self,
        samples: Sequence[AxisSample],
        debug: Optional[DebugContext]
    ) -> Tuple[StripTypeDetection, SegmentCandidate]:
        check_signal(samples)
        signal = condition_signal(samples)

        candidates = [
            build_candidate(samples, signal, debug)
            for build_candidate in SEGMENTERS.values()
        ]
        for candidate in candidates:
            stats_summary = (
                f'avg_strength={candidate.stats.average_strength:.2f} gap_ratio={candidate.stats.gap_ratio:.2f}'
                if candidate.stats
                else 'no-stats'
            )
            logger.debug(f'Candidate source={candidate.source.value} pads={candidate.pad_count} {stats_summary}')

        selected = select_best_candidate(candidates)
        if selected is None:
            selected = SegmentCandidate(source=SegmentSource.CLUSTER, segments=(), stats=None)

        pad_count = selected.pad_count
        inferred_type = infer_strip_type(pad_count)
        confidence = calculate_confidence(pad_count, inferred_type, selected.stats, selected.source)
        detection = StripTypeDetection(
            pad_count=pad_count,
            inferred_type=inferred_type,
            confidence=confidence,
            source=selected.source if pad_count else None
        )

        logger.debug(
            f'Detection pad_count={pad_count} inferred_type={inferred_type.value} '
            f'confidence={confidence:.2f} source={selected.source.value}'
        )

        if debug is not None and debug.is_enabled():
            self._trace(self._trace_candidates, debug, signal, candidates, selected)
        return detection, selected

    def _trace(self, hook: Callable[..., None], *args) -> None:
        try:
            hook(*args)
        except Exception as e:
            logger.warning(f'Debug trace failed in {hook.__name__}: {e}', exc_info=True)

    def _trace_samples(
        self,
        debug: DebugContext,
        buffer: PixelBuffer,
        orientation: str,
        samples: Sequence[AxisSample]
    ) -> None:
        vis = visualize_sample_points(
            rgba_to_bgr(buffer.data), len(samples), orientation, self.config['padding_ratio']
        )
        debug.add_step(
            '01_axis_samples',
            'Axis Samples',
            vis,
            {
                'orientation': orientation,
                'buffer_size': [buffer.width, buffer.height],
                'sample_count': len(samples),
                'saturation': [round(s.saturation, 2) for s in samples]
            },
            f'{len(samples)} samples along a {orientation} strip',
            parameters={
                'sample_count': self.config['sample_count'],
                'padding_ratio': self.config['padding_ratio'],
                'alpha_threshold': self.config['alpha_threshold']
            }
        )

    def _trace_candidates(
        self,
        debug: DebugContext,
        signal: ConditionedSignal,
        candidates: Sequence[SegmentCandidate],
        selected: SegmentCandidate
    ) -> None:
        candidate_data = []
        for candidate in candidates:
            entry = candidate.to_dict()
            entry['eligible'] = is_eligible(candidate)
            entry['score'] = evaluate_segment_candidate(candidate) if candidate.pad_count else None
            candidate_data.append(entry)
        debug.add_step('04_candidates', 'Candidate Evaluation', data={
            'prominence': [round(float(v), 2) for v in signal.prominence],
            'candidates': candidate_data,
            'selected_source': selected.source
        })

    def _trace_result(
        self,
        debug: DebugContext,
        buffer: PixelBuffer,
        orientation: str,
        selected: SegmentCandidate,
        detection: StripTypeDetection
    ) -> None:
        vis = create_final_visualization(
            rgba_to_bgr(buffer.data),
            selected.segments,
            self.config['sample_count'],
            orientation,
            summary_lines=[
                f'{detection.inferred_type.value} pads={detection.pad_count}',
                f'confidence={detection.confidence:.2f} source={selected.source.value}'
            ],
            padding_ratio=self.config['padding_ratio']
        )
        debug.add_step(
            '05_classification',
            'Classification',
            vis,
            detection.to_dict(),
            f'Selected {selected.source.value} candidate with {detection.pad_count} pads'
        )


def detect_strip_type(image_path: str, debug: Optional[DebugContext] = None) -> StripTypeDetection:
    """Detect the strip type of an image at a local path or URL with default configuration."""
    return StripTypeDetectionService().detect_strip_type(image_path, debug=debug)
