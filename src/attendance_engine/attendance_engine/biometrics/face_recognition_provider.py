"""Server-side face provider backed by ``face_recognition`` (dlib).

Frames arrive as base64 data URLs from the browser camera. Detection uses
dlib's CNN detector so every face carries a confidence score; encodings are
the usual 128-d ``face_recognition`` vectors.
"""
from __future__ import annotations

import base64
import binascii
from typing import List

import cv2
import face_recognition
import numpy as np

from ..core.exceptions import ValidationError
from .model import FaceDetection


def decode_frame(data_url: str) -> np.ndarray:
    """Decode a ``data:image/...;base64,`` payload into an RGB uint8 array."""
    payload = data_url.split(",", 1)[1] if "," in data_url else data_url
    try:
        nparr = np.frombuffer(base64.b64decode(payload), np.uint8)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Camera frame is not valid base64.") from exc

    img = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValidationError("Camera frame could not be decoded.")
    if len(img.shape) == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
    elif len(img.shape) == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    rgb = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    return np.ascontiguousarray(rgb, dtype=np.uint8)


class FaceRecognitionProvider:
    def __init__(self, *, upsample: int = 1, num_jitters: int = 1):
        self._upsample = int(upsample)
        self._num_jitters = int(num_jitters)

    def detect_faces(self, frame) -> List[FaceDetection]:
        rgb = decode_frame(frame) if isinstance(frame, str) else frame
        height, width = rgb.shape[:2]

        raw = face_recognition.api.cnn_face_detector(rgb, self._upsample)
        boxes, scores = [], []
        for det in raw:
            rect = det.rect
            boxes.append(
                (
                    max(rect.top(), 0),
                    min(rect.right(), width),
                    min(rect.bottom(), height),
                    max(rect.left(), 0),
                )
            )
            scores.append(min(float(det.confidence), 1.0))

        if not boxes:
            return []

        encodings = face_recognition.face_encodings(rgb, boxes, num_jitters=self._num_jitters)
        return [
            FaceDetection(score=score, embedding=tuple(float(x) for x in enc), box=tuple(float(v) for v in box))
            for box, score, enc in zip(boxes, scores, encodings)
        ]
