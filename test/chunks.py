"""Builders for synthetic AXML / ARSC chunks used by the tests."""
from struct import pack

NO_ENTRY = 0xFFFFFFFF
ANDROID_NS = "http://schemas.android.com/apk/res/android"


def header(tag, header_size, total_size):
    return pack('<HHL', tag, header_size, total_size)


def utf16_entry(s):
    data = s.encode('utf-16-le')
    n = len(data) // 2
    if n > 0x7FFF:
        length = pack('<HH', 0x8000 | (n >> 16), n & 0xFFFF)
    else:
        length = pack('<H', n)
    return length + data + b'\x00\x00'


def _utf8_len(n):
    if n > 0x7F:
        return bytes([0x80 | (n >> 8), n & 0xFF])
    return bytes([n])


def utf8_entry(s):
    data = s.encode('utf-8')
    return _utf8_len(len(s.encode('utf-16-le')) // 2) + _utf8_len(len(data)) + data + b'\x00'


def string_pool(strings, utf8=False, entries=None):
    """
    A string pool chunk. `entries` can hold the raw bytes of each entry
    to build pools with broken content.
    """
    if entries is None:
        encode = utf8_entry if utf8 else utf16_entry
        entries = [encode(s) for s in strings]
    offsets = []
    data = b''
    for e in entries:
        offsets.append(len(data))
        data += e
    data += b'\x00' * (-len(data) % 4)

    count = len(entries)
    strings_start = 0x1C + 4 * count if count else 0
    total = 0x1C + 4 * count + len(data)
    flags = 1 << 8 if utf8 else 0
    return (
        header(0x0001, 0x1C, total)
        + pack('<5I', count, 0, flags, strings_start, 0)
        + pack('<{}I'.format(count), *offsets)
        + data
    )


def resource_map(ids):
    return header(0x0180, 8, 8 + 4 * len(ids)) + pack('<{}I'.format(len(ids)), *ids)


def _node(tag, ext, line=1):
    return header(tag, 0x10, 0x10 + len(ext)) + pack('<LL', line, NO_ENTRY) + ext


def start_namespace(prefix, uri, line=1):
    return _node(0x0100, pack('<LL', prefix, uri), line)


def end_namespace(prefix, uri, line=1):
    return _node(0x0101, pack('<LL', prefix, uri), line)


def attribute(ns, name, raw=NO_ENTRY, value_type=0x03, data=NO_ENTRY):
    return pack('<LLL', ns, name, raw) + pack('<HBBL', 8, 0, value_type, data)


def start_element(name, attributes=(), ns=NO_ENTRY, line=1, block_size=None):
    if block_size is None:
        block_size = 20 * len(attributes)
    ext = pack('<LLLHHHH', ns, name, block_size, len(attributes), 0, 0, 0)
    return _node(0x0102, ext + b''.join(attributes), line)


def end_element(name, ns=NO_ENTRY, line=1):
    return _node(0x0103, pack('<LL', ns, name), line)


def cdata(index, line=1):
    return _node(0x0104, pack('<L', index) + pack('<HBBL', 8, 0, 0, 0), line)


def xml_document(*chunks):
    body = b''.join(chunks)
    return header(0x0003, 8, 8 + len(body)) + body


def table(package_count, *chunks):
    body = b''.join(chunks)
    return header(0x0002, 0x0C, 0x0C + len(body)) + pack('<L', package_count) + body


def package(package_id, name, types=(), keys=(), header_size=0x120, name_units=None, trailer=b''):
    """
    A package chunk followed by its type and key string pools and `trailer`.
    """
    if name_units is None:
        units = list(name.encode('utf-16-le'))
        name_units = [units[i] | (units[i + 1] << 8) for i in range(0, len(units), 2)]
        name_units += [0] * (128 - len(name_units))
    type_pool = string_pool(types)
    key_pool = string_pool(keys)
    fields = pack('<L', package_id) + pack('<128H', *name_units)
    fields += pack('<4L', header_size, len(types), header_size + len(type_pool), len(keys))
    if header_size >= 0x120:
        fields += pack('<L', 0)
    fields += b'\x00' * (header_size - 8 - len(fields))
    body = fields + type_pool + key_pool + trailer
    return header(0x0200, header_size, 8 + len(body)) + body


def manifest_document():
    """
    A small manifest: a package with one permission and a launcher activity.
    """
    strings = [
        "android",                                # 0
        ANDROID_NS,                               # 1
        "manifest",                               # 2
        "package",                                # 3
        "com.example.app",                        # 4
        "versionCode",                            # 5
        "uses-permission",                        # 6
        "name",                                   # 7
        "android.permission.INTERNET",            # 8
        "application",                            # 9
        "activity",                               # 10
        ".MainActivity",                          # 11
        "intent-filter",                          # 12
        "action",                                 # 13
        "android.intent.action.MAIN",             # 14
        "category",                               # 15
        "android.intent.category.LAUNCHER",       # 16
        "uses-sdk",                               # 17
        "minSdkVersion",                          # 18
        "service",                                # 19
        "com.example.app.SyncService",            # 20
    ]
    return xml_document(
        string_pool(strings, utf8=True),
        start_namespace(0, 1),
        start_element(2, [
            attribute(NO_ENTRY, 3, raw=4),
            attribute(1, 5, value_type=0x10, data=42),
        ]),
        start_element(17, [attribute(1, 18, value_type=0x10, data=21)]),
        end_element(17),
        start_element(6, [attribute(1, 7, raw=8)]),
        end_element(6),
        start_element(9),
        start_element(10, [attribute(1, 7, raw=11)]),
        start_element(12),
        start_element(13, [attribute(1, 7, raw=14)]),
        end_element(13),
        start_element(15, [attribute(1, 7, raw=16)]),
        end_element(15),
        end_element(12),
        end_element(10),
        start_element(19, [attribute(1, 7, raw=20)]),
        end_element(19),
        end_element(9),
        end_element(2),
        end_namespace(0, 1),
    )
