import cv2
import numpy as np
import torch
from ml.config import IMG_SIZE, RESIZE_SIZE, MEAN, STD


def center_crop(rgb, size):
    h, w = rgb.shape[:2]
    y = max(0, (h - size) // 2)
    x = max(0, (w - size) // 2)
    return rgb[y:y + size, x:x + size]


def preprocess_bgr(frame_bgr):
    """
    frame_bgr -> torch.FloatTensor (1,3,224,224) in RGB, normalized.
    Shorter side resized to RESIZE_SIZE, then center-cropped (ImageNet eval).
    """
    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    h, w = rgb.shape[:2]
    scale = RESIZE_SIZE / float(min(h, w))
    new_w, new_h = max(IMG_SIZE, round(w * scale)), max(IMG_SIZE, round(h * scale))
    rgb = cv2.resize(rgb, (new_w, new_h), interpolation=cv2.INTER_LINEAR)
    rgb = center_crop(rgb, IMG_SIZE)

    x = rgb.astype("float32") / 255.0
    x = (x - np.array(MEAN, dtype=np.float32)) / np.array(STD, dtype=np.float32)
    x = np.ascontiguousarray(np.transpose(x, (2, 0, 1)))[None]  # NCHW

    return torch.from_numpy(x)
