import zipfile

from loguru import logger

from .errors import EntryNotFound

MANIFEST_ENTRY = "AndroidManifest.xml"


def read_file(path: str) -> bytes:
    """
    :return: the raw content of the file at `path`
    """
    with open(path, "rb") as fp:
        return fp.read()


def read_apk_entry(apk_file_name: str, entry: str = MANIFEST_ENTRY) -> bytes:
    """
    Read one entry of an apk (or any other zip archive).

    :param apk_file_name: path to the apk
    :param entry: name of the entry inside the archive
    :raises EntryNotFound: if the archive has no such entry
    :return: the raw bytes of the entry
    """
    with zipfile.ZipFile(apk_file_name, mode="r") as zf:
        try:
            info = zf.getinfo(entry)
        except KeyError:
            raise EntryNotFound(
                "Can not find {} in {}".format(entry, apk_file_name)
            ) from None
        logger.debug(f"{entry}: {info.file_size} bytes in {apk_file_name}")
        return zf.read(info)
