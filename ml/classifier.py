import logging
import os
from typing import List, Optional

import torch
from torchvision import models

from domain.models import RawPrediction
from ml.config import TOP_K
from ml.preprocess import preprocess_bgr

logger = logging.getLogger(__name__)


def primary_name(class_name: str) -> str:
    """'bell pepper, sweet pepper' -> 'bell pepper'"""
    return class_name.split(",")[0].strip()


class ProduceClassifier:
    """Generic ImageNet classifier returning a ranked prediction list."""

    def __init__(self, model_path: Optional[str] = None, top_k: int = TOP_K):
        if model_path is not None and not os.path.exists(model_path):
            raise FileNotFoundError(f"Model file not found: {model_path}")

        self.top_k = top_k
        self.device = torch.device("cuda" if torch.cuda.is_available() else "cpu")
        self.weights = models.MobileNet_V2_Weights.IMAGENET1K_V1
        self.categories = [primary_name(c) for c in self.weights.meta["categories"]]
        self.model = self._load_model(model_path)
        self.model.eval()

    def _extract_state_dict(self, ckpt):
        if isinstance(ckpt, dict):
            if "model_state_dict" in ckpt:
                sd = ckpt["model_state_dict"]
            elif "state_dict" in ckpt:
                sd = ckpt["state_dict"]
            else:
                sd = ckpt
        else:
            sd = ckpt

        # strip DataParallel prefix
        if isinstance(sd, dict) and any(k.startswith("module.") for k in sd.keys()):
            sd = {k.replace("module.", "", 1): v for k, v in sd.items()}

        return sd

    def _load_model(self, model_path: Optional[str]):
        if model_path is None:
            logger.info("Loading pretrained MobileNetV2 weights")
            model = models.mobilenet_v2(weights=self.weights)
        else:
            logger.info("Loading MobileNetV2 checkpoint %s", model_path)
            model = models.mobilenet_v2(weights=None)
            ckpt = torch.load(model_path, map_location="cpu")
            model.load_state_dict(self._extract_state_dict(ckpt), strict=True)

        return model.float().to(self.device)

    @torch.no_grad()
    def predict(self, tensor: torch.Tensor) -> List[RawPrediction]:
        x = tensor.to(self.device, dtype=torch.float32, non_blocking=True)
        probs = torch.softmax(self.model(x), dim=1)[0]

        k = min(self.top_k, probs.shape[0])
        top = torch.topk(probs, k)
        return [
            RawPrediction(label=self.categories[int(i)], confidence=float(p))
            for p, i in zip(top.values.tolist(), top.indices.tolist())
        ]

    def classify(self, frame_bgr) -> List[RawPrediction]:
        """Ranked predictions for a BGR frame, best first."""
        return self.predict(preprocess_bgr(frame_bgr))
