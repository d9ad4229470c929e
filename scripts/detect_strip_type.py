#!/usr/bin/env python3
"""
Command-line strip type detection.

Thin wrapper around StripTypeDetectionService for trying images locally.
Saves the detection trace to the experiments folder when asked.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from datetime import datetime

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from config.strip_type_config import STRIP_TYPE_DEBUG_OUTPUT_DIR
from services.strip_type import StripTypeDetectionService
from services.utils.debug import DebugContext
from utils.image_loader import image_name_from_path, is_remote_path

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description='Detect the strip type (three-pad / six-pad) of an image')
    parser.add_argument('image_path', help='Path or URL of a test strip image')
    parser.add_argument('--save-results', action='store_true', help='Save the detection trace to the output dir')
    parser.add_argument('--output-dir', type=str, default=STRIP_TYPE_DEBUG_OUTPUT_DIR,
                        help='Output directory for the detection trace')
    parser.add_argument('--json', action='store_true', help='Print only the JSON result')
    parser.add_argument('--verbose', action='store_true', help='Log candidate details')

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger('services.strip_type').setLevel(logging.DEBUG)

    if not is_remote_path(args.image_path) and not Path(args.image_path).exists():
        print(f"ERROR: Image not found: {args.image_path}")
        sys.exit(1)

    debug = None
    if args.save_results:
        # Timestamped run name so earlier traces are kept
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        run_name = f"{Path(image_name_from_path(args.image_path)).stem}_{timestamp}"
        debug = DebugContext(
            enabled=True,
            output_dir=args.output_dir,
            image_name=run_name,
            run_tag='strip_type'
        )

    service = StripTypeDetectionService()
    detection = service.detect_strip_type(args.image_path, debug=debug)
    result = detection.to_dict()

    if args.json:
        print(json.dumps(result))
    else:
        print(f"\n{'='*70}")
        print(f"Strip Type Detection")
        print(f"{'='*70}")
        print(f"Image: {args.image_path}")
        print(f"  Inferred type: {result['inferredType']}")
        print(f"  Pad count: {result['padCount']}")
        print(f"  Confidence: {result['confidence']:.3f}")
        if detection.source:
            print(f"  Winning strategy: {detection.source.value}")
        print(f"{'='*70}\n")

    if debug:
        log_path = debug.save_log()
        if log_path and not args.json:
            print(f"✓ Trace saved to: {log_path}")

    sys.exit(0 if detection.pad_count > 0 else 1)


if __name__ == '__main__':
    main()
