from .errors import ConfigError

# Looked up in the current working directory unless --settings is given
SETTINGS_FILENAME = 'voc_tfrecord_settings.json'

LABEL_MAP_FILENAME = 'label_map.txt'
RECORD_EXTENSION = 'tfrecord'
TEST_SPLIT_NAME = 'test'
TRAIN_SPLIT_NAME = 'train'
ANNOTATION_EXTENSION = '.xml'

# Image extension -> value of the image/format feature
IMAGE_FORMATS = {
    '.png': 'png',
    '.jpg': 'jpeg',
    '.jpeg': 'jpeg',
}

DEFAULT_RETAIN = '20%'
MAX_RETAIN_VALUE = 255


def record_filename(split_name):
    return f"{split_name}.{RECORD_EXTENSION}"


def parse_retain_ratio(text: str) -> int:
    """
    Reduce a retain ratio such as '20%', '20/100' or '20' to the integer 20.

    Raises ConfigError when nothing parsable is left.
    """
    value = str(text)
    if '/' in value:
        value = value.split('/')[0]
    elif '%' in value:
        value = value.split('%')[0]
    value = value.strip()

    try:
        ratio = int(value)
    except ValueError as e:
        raise ConfigError(f"Could not parse retain ratio '{text}'") from e

    if ratio < 0 or ratio > MAX_RETAIN_VALUE:
        raise ConfigError(f"Retain ratio '{text}' is out of range")
    return ratio
