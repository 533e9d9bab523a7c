import argparse
import logging
import sys

from ml.classifier import ProduceClassifier
from ui.camera_loop import CameraLoop
from utils.app_logging import setup_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="AgroBrain realtime produce recognition")
    parser.add_argument("--camera", type=int, default=0, help="camera index")
    parser.add_argument("--model", default=None, help="optional MobileNetV2 checkpoint")
    parser.add_argument("--debug", action="store_true", help="show the debug panel")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    logger.info("Loading model...")
    try:
        classifier = ProduceClassifier(args.model)
    except (FileNotFoundError, RuntimeError) as e:
        logger.error("Model load failed: %s", e)
        return 1
    logger.info("AI active")

    loop = CameraLoop(classifier, camera_index=args.camera, debug=args.debug)
    return 0 if loop.run() else 1


if __name__ == "__main__":
    sys.exit(main())
