"""Target resource path derivation."""

from pathlib import Path
from typing import Union

from res_translator import language_codes as lc

RES_SEGMENT = "/res/"


def get_value_resource_path(source_path: Union[str, Path], language_code: str) -> Path:
    """
    Path of the translated file for a language.

    The file keeps its name and moves to values-<suffix> under the same res
    directory, e.g. app/src/main/res/values/strings.xml with 'zh-CN' becomes
    app/src/main/res/values-zh-rCN/strings.xml.

    Raises:
        ValueError: If source_path has no /res/ segment
    """
    posix = Path(source_path).as_posix()
    index = posix.find(RES_SEGMENT)
    if index < 0:
        raise ValueError(f"Not inside a res directory: {source_path}")

    res_root = posix[:index + len(RES_SEGMENT)]
    folder = f"values-{lc.get_android_folder_suffix(language_code)}"
    return Path(res_root) / folder / Path(posix).name
