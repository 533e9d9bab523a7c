IMG_SIZE = 224
RESIZE_SIZE = 256  # Shorter side before the center crop
MEAN = [0.485, 0.456, 0.406]
STD  = [0.229, 0.224, 0.225]

TOP_K = 3  # Ranked predictions returned per frame; only the first is consumed
