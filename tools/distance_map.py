import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import argparse, cv2, numpy as np
from dataclasses import asdict
from chamfer.config import TransformConfig, config_from_dict, load_config
from chamfer.distance import distance_map
from chamfer.mask import threshold_mask
from chamfer.visualize import colorize_distance_map


def parse_weights(values):
    # one preset name, or two integers
    if values is None:
        return None
    if len(values) == 1:
        return values[0]
    if len(values) == 2:
        try:
            return [int(v) for v in values]
        except ValueError:
            raise SystemExit(f'--weights expects a preset name or two integers, got {values}')
    raise SystemExit(f'--weights expects a preset name or two integers, got {values}')


def image_distances(result):
    # OpenCV image writers keep only uint8/uint16 losslessly; other buffers go through uint16 when they fit
    d = result.distances
    if d.dtype in (np.uint8, np.uint16):
        return d
    hi = int(d.max()) if d.size else 0
    if hi > np.iinfo(np.uint16).max:
        raise SystemExit(f'Distances reach {hi}, too large for a 16-bit image; use a .npy output')
    return d.astype(np.uint16)


def build_config(args):
    cfg = load_config(args.config) if args.config else TransformConfig()
    overrides = {}
    weights = parse_weights(args.weights)
    if weights is not None:
        overrides['weights'] = weights
    if args.no_normalize:
        overrides['normalize'] = False
    if args.label is not None:
        overrides['label'] = args.label
    if args.dtype is not None:
        overrides['dtype'] = args.dtype
    if args.threshold is not None:
        overrides['threshold'] = args.threshold
    data = asdict(cfg)
    data.update(overrides)
    return config_from_dict(data)


def main(argv=None):
    ap = argparse.ArgumentParser(description='Chamfer distance map of a binary image')
    ap.add_argument('--image', required=True, help='input mask image path')
    ap.add_argument('--out', required=True, help='output path (.png for 16-bit PNG, .npy for numpy)')
    ap.add_argument('--config', help='YAML config (weights/normalize/label/dtype/threshold)')
    ap.add_argument('--weights', nargs='+', metavar='W',
                    help='preset name (borgefors, chessboard, city-block, quasi-euclidean, weights-23, weights-57) or two ints')
    ap.add_argument('--no-normalize', action='store_true', help='keep distances in weight units')
    ap.add_argument('--label', type=int, help='foreground pixel value (default 255)')
    ap.add_argument('--dtype', help='distance buffer type (default uint16)')
    ap.add_argument('--threshold', type=float, help='binarize input first: pixels > threshold become foreground')
    ap.add_argument('--invert', action='store_true', help='with --threshold, pixels <= threshold become foreground')
    ap.add_argument('--preview', action='store_true', help='also write a colour preview next to --out')
    ap.add_argument('--verbose', action='store_true')
    args = ap.parse_args(argv)

    try:
        cfg = build_config(args)
    except ValueError as e:
        raise SystemExit(f'Invalid configuration: {e}')

    img = cv2.imread(args.image, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise SystemExit(f'Cannot read {args.image}')
    if img.ndim == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)

    label = cfg.label
    if cfg.threshold is not None:
        img = threshold_mask(img, cfg.threshold, invert=args.invert)
        label = 255

    print(f'[INFO] {args.image}: {img.shape[1]}x{img.shape[0]}, weights={tuple(cfg.weight_pair())}, '
          f'normalize={cfg.normalize}')
    result = distance_map(img, cfg.weight_pair(), normalize=cfg.normalize, label=label,
                          dtype=cfg.numpy_dtype(), verbose=args.verbose)
    if result.unreachable.any():
        print(f'[INFO] {int(result.unreachable.sum())} foreground pixels have no background in the image')

    if args.out.endswith('.npy'):
        np.save(args.out, result.distances)
    elif not cv2.imwrite(args.out, image_distances(result)):
        raise SystemExit(f'Cannot write {args.out}')
    print(f'[OK] distance map saved → {args.out} (range 0..{result.max_value})')

    if args.preview:
        prev = os.path.splitext(args.out)[0] + '_preview.png'
        cv2.imwrite(prev, colorize_distance_map(result))
        print(f'Preview → {prev}')
    return result


if __name__ == '__main__':
    main()
