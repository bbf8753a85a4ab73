import sys
import os
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, ROOT)
sys.path.insert(0, os.path.join(ROOT, 'tools'))

import cv2, numpy as np
import pytest
import distance_map as cli
from chamfer.config import TransformConfig, config_from_dict, load_config
from chamfer.weights import InvalidWeightsError


def test_defaults():
    cfg = TransformConfig()
    assert cfg.weight_pair() == (3, 4)
    assert cfg.numpy_dtype() == np.uint16
    assert cfg.normalize and cfg.label == 255 and cfg.threshold is None


def test_load_yaml(tmp_path):
    p = tmp_path / 'dt.yaml'
    p.write_text('weights: [5, 7]\nnormalize: false\nlabel: 1\ndtype: int32\n', encoding='utf-8')
    cfg = load_config(p)
    assert cfg.weight_pair() == (5, 7)
    assert cfg.normalize is False
    assert cfg.label == 1
    assert cfg.numpy_dtype() == np.int32


def test_empty_yaml_gives_defaults(tmp_path):
    p = tmp_path / 'empty.yaml'
    p.write_text('', encoding='utf-8')
    assert load_config(p) == TransformConfig()


def test_bad_config():
    with pytest.raises(ValueError):
        config_from_dict({'weigths': [3, 4]})
    with pytest.raises(InvalidWeightsError):
        config_from_dict({'weights': [0, 4]})
    with pytest.raises(ValueError):
        config_from_dict({'dtype': 'float32'})


def test_cli_writes_npy_and_preview(tmp_path):
    img = np.full((20, 30), 255, np.uint8)
    cv2.rectangle(img, (0, 0), (4, 19), 0, -1)
    src = tmp_path / 'mask.png'
    cv2.imwrite(str(src), img)
    out = tmp_path / 'dist.npy'

    result = cli.main(['--image', str(src), '--out', str(out), '--weights', 'chessboard', '--preview'])
    d = np.load(out)
    assert d.shape == (20, 30)
    assert d[0, 4] == 0 and d[0, 5] == 1 and d[10, 29] == 25
    assert result.max_value == 25
    assert (tmp_path / 'dist_preview.png').exists()


def test_cli_threshold_and_png(tmp_path):
    img = np.full((10, 10), 200, np.uint8)
    img[5, 5] = 10
    src = tmp_path / 'grey.png'
    cv2.imwrite(str(src), img)
    out = tmp_path / 'dist.png'

    cli.main(['--image', str(src), '--out', str(out), '--threshold', '100',
              '--weights', '3', '4', '--no-normalize'])
    d = cv2.imread(str(out), cv2.IMREAD_UNCHANGED)
    assert d.dtype == np.uint16
    assert d[5, 5] == 0 and d[5, 6] == 3 and d[4, 4] == 4


def test_cli_rejects_bad_input(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(['--image', str(tmp_path / 'missing.png'), '--out', str(tmp_path / 'o.npy')])
    with pytest.raises(SystemExit):
        cli.main(['--image', 'x.png', '--out', 'o.npy', '--weights', '0', '4'])


@pytest.mark.parametrize('dtype', ['int16', 'int32', 'uint32'])
def test_cli_png_keeps_values_of_wider_buffers(tmp_path, dtype):
    img = np.full((1, 200), 255, np.uint8)
    img[0, 0] = 0
    src = tmp_path / 'strip.png'
    cv2.imwrite(str(src), img)
    out = tmp_path / f'dist_{dtype}.png'

    result = cli.main(['--image', str(src), '--out', str(out), '--weights', 'borgefors',
                       '--no-normalize', '--dtype', dtype])
    assert result.distances.dtype == np.dtype(dtype)
    d = cv2.imread(str(out), cv2.IMREAD_UNCHANGED)
    assert d.dtype == np.uint16
    assert d[0, 199] == 597 == result.max_value
    assert np.array_equal(d.astype(np.int64), result.distances.astype(np.int64))


def test_cli_png_refuses_values_above_16_bits(tmp_path):
    # no background: the int32 sentinel does not fit in a 16-bit image
    src = tmp_path / 'full.png'
    cv2.imwrite(str(src), np.full((4, 4), 255, np.uint8))
    out = tmp_path / 'dist.png'
    with pytest.raises(SystemExit):
        cli.main(['--image', str(src), '--out', str(out), '--no-normalize', '--dtype', 'int32'])
    assert not out.exists()
    cli.main(['--image', str(src), '--out', str(tmp_path / 'dist.npy'), '--no-normalize', '--dtype', 'int32'])
    assert np.all(np.load(tmp_path / 'dist.npy') == np.iinfo(np.int32).max)


def test_cli_threshold_invert(tmp_path):
    img = np.full((10, 10), 200, np.uint8)
    img[5, 5] = 10
    src = tmp_path / 'grey.png'
    cv2.imwrite(str(src), img)
    out = tmp_path / 'dist.npy'

    cli.main(['--image', str(src), '--out', str(out), '--threshold', '100', '--invert',
              '--weights', '3', '4', '--no-normalize'])
    d = np.load(out)
    # only the dark pixel is foreground now, surrounded by background
    assert d[5, 5] == 3
    assert np.count_nonzero(d) == 1
