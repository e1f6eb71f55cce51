import re
from typing import Optional

from loguru import logger
from lxml import etree

from .decoder import AXMLDecoder
from .xml_events import EndElement, StartElement, Text


class AXMLPrinter:
    """
    Converter for AXML Files into a lxml ElementTree, which can easily be
    converted into XML.

    A Reference Implementation can be found at http://androidxref.com/9.0.0_r3/xref/frameworks/base/tools/aapt/XMLNode.cpp
    """

    __charrange = re.compile(
        '^[\u0020-\uD7FF\u0009\u000A\u000D\uE000-\uFFFD\U00010000-\U0010FFFF]*$'
    )
    __replacement = re.compile(
        '[^\u0020-\uD7FF\u0009\u000A\u000D\uE000-\uFFFD\U00010000-\U0010FFFF]'
    )

    def __init__(self, raw_buff: bytes) -> None:
        logger.debug("AXMLPrinter")

        self.decoder = AXMLDecoder(raw_buff)
        self.root = None
        cur = []

        for event in self.decoder:
            if isinstance(event, StartElement):
                tag = "{}{}".format(self._print_namespace(event.namespace), self._fix_name(event.name))
                logger.debug("START_TAG: {} (line={})".format(tag, event.line_number))

                elem = etree.Element(tag, nsmap=event.nsmap or None)
                for key, value in event.attributes:
                    name = self._attribute_name(key, event.nsmap)
                    if name in elem.attrib:
                        logger.warning(
                            "Duplicate attribute '{}'! Will overwrite!".format(name)
                        )
                    elem.set(name, self._fix_value(value))

                if self.root is None:
                    self.root = elem
                elif not cur:
                    # looks like we lost the root?
                    logger.error(
                        "No more elements available to attach to! Is the XML malformed?"
                    )
                    break
                else:
                    cur[-1].append(elem)
                cur.append(elem)

            elif isinstance(event, EndElement):
                if not cur:
                    logger.error(
                        "Too many END_TAG! No more elements available to attach to!"
                    )
                    continue
                tag = "{}{}".format(self._print_namespace(event.namespace), self._fix_name(event.name))
                if cur[-1].tag != tag:
                    logger.warning(
                        "Closing tag '{}' does not match current stack! At line number: {}. Is the XML malformed?".format(
                            event.name, event.line_number
                        )
                    )
                cur.pop()

            elif isinstance(event, Text):
                if cur:
                    text = self._fix_value(event.text)
                    # text after a child element belongs to the child's tail
                    if len(cur[-1]):
                        child = cur[-1][-1]
                        child.tail = (child.tail or "") + text
                    else:
                        cur[-1].text = (cur[-1].text or "") + text
                else:
                    logger.warning("Text outside of the root element is dropped")

        if cur:
            logger.warning("Not all elements were closed! Malformed AXML?")

    def get_xml(self, pretty: bool = True) -> bytes:
        """
        Get the XML as an UTF-8 string

        :returns: bytes encoded as UTF-8
        """
        if self.root is None:
            return b""
        return etree.tostring(self.root, encoding="utf-8", pretty_print=pretty)

    def get_xml_obj(self) -> Optional[etree._Element]:
        """
        Get the XML as an ElementTree object

        :returns: `lxml.etree.Element` object
        """
        return self.root

    def _attribute_name(self, key: str, nsmap: dict) -> str:
        """
        Turn a `prefix:name` attribute key into the `{uri}name` form of lxml.
        """
        if ":" not in key:
            return self._fix_name(key)
        prefix, name = key.split(":", 1)
        if prefix not in nsmap:
            logger.warning(
                "Confused: name contains a unknown namespace prefix: '{}'.".format(key)
            )
            return self._fix_name(name)
        return "{}{}".format(self._print_namespace(nsmap[prefix]), self._fix_name(name))

    def _fix_name(self, name: str) -> str:
        """
        Attribute names must start with a letter or underscore, the rest of the
        name can contain letters, digits, hyphens, underscores, and periods.
        Everything else is replaced by underscores.
        """
        if not name or (not name[0].isalpha() and name[0] != "_"):
            logger.warning(
                "Invalid start for name '{}'. "
                "XML name must start with a letter.".format(name)
            )
            name = "_{}".format(name)
        if not re.match(r"^[a-zA-Z0-9._-]*$", name):
            logger.warning(
                "Name '{}' contains invalid characters!".format(name)
            )
            name = re.sub(r"[^a-zA-Z0-9._-]", "_", name)
        return name

    def _fix_value(self, value: str) -> str:
        """
        Return a cleaned version of a value
        according to the specification:
        > Char	   ::=   	#x9 | #xA | #xD | [#x20-#xD7FF] | [#xE000-#xFFFD] | [#x10000-#x10FFFF]

        See <https://www.w3.org/TR/xml/#charsets>

        :param value: a value to clean
        :return: the cleaned value
        """
        # Reading string until \x00. This is the same as aapt does.
        if "\x00" in value:
            logger.warning(
                "Null byte found in attribute value at position {}".format(value.find("\x00"))
            )
            value = value[: value.find("\x00")]

        if not self.__charrange.match(value):
            logger.warning(
                "Invalid character in value found. Replacing with '_'."
            )
            value = self.__replacement.sub('_', value)
        return value

    @staticmethod
    def _print_namespace(uri: str) -> str:
        if uri != "":
            uri = "{{{}}}".format(uri)
        return uri
