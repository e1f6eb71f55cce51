from typing import Optional

from lxml import etree

from .internal_types import ANDROID_NAMESPACE

ACTION_MAIN = "android.intent.action.MAIN"
CATEGORY_LAUNCHER = "android.intent.category.LAUNCHER"

COMPONENT_TAGS = ("activity", "activity-alias", "service", "provider", "receiver")


def _attr(elem, key: str) -> Optional[str]:
    """
    Value of an `android:` attribute, or of the plain attribute if there is none.
    """
    if elem is None:
        return None
    v = elem.get(f"{{{ANDROID_NAMESPACE}}}{key}")
    if v is not None:
        return v
    return elem.get(key)


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value, 0)
    except ValueError:
        return None


class ManifestInfo:
    """
    Summary of an `AndroidManifest.xml`: package, sdk versions, permissions,
    the declared components and the launcher entry point.
    """

    def __init__(self, package_name=None, version_code=None, version_name=None,
                 min_sdk_version=None, target_sdk_version=None, permissions=None,
                 activities=None, services=None, providers=None, receivers=None,
                 main_activity=None):
        self.package_name = package_name
        self.version_code = version_code
        self.version_name = version_name
        self.min_sdk_version = min_sdk_version
        self.target_sdk_version = target_sdk_version
        self.permissions = permissions or []
        self.activities = activities or []
        self.services = services or []
        self.providers = providers or []
        self.receivers = receivers or []
        self.main_activity = main_activity

    @classmethod
    def from_xml(cls, root: etree._Element) -> "ManifestInfo":
        """
        :param root: the `<manifest>` element, as built by `AXMLPrinter`
        """
        if root is None or root.tag != "manifest":
            raise ValueError("No manifest tag at root level found")

        package = root.get("package")

        def qualify_name(name):
            # If name starts with '.', qualify it with package.
            if name and name.startswith(".") and package:
                return f"{package}{name}"
            return name

        uses_sdk = root.find("uses-sdk")
        permissions = [
            _attr(p, "name") for p in root.findall("uses-permission") if _attr(p, "name")
        ]

        components = {tag: [] for tag in COMPONENT_TAGS}
        main_activity = None
        launcher_found = False
        app = root.find("application")
        if app is not None:
            for comp in app:
                if comp.tag not in components:
                    continue
                name = qualify_name(_attr(comp, "name"))
                components[comp.tag].append(name)
                if comp.tag not in ("activity", "activity-alias") or launcher_found:
                    continue
                for f in comp.findall("intent-filter"):
                    actions = [_attr(a, "name") for a in f.findall("action")]
                    if ACTION_MAIN not in actions:
                        continue
                    categories = [_attr(c, "name") for c in f.findall("category")]
                    if CATEGORY_LAUNCHER in categories:
                        main_activity = name
                        launcher_found = True
                    elif main_activity is None:
                        main_activity = name

        return cls(
            package_name=package,
            version_code=_to_int(_attr(root, "versionCode")),
            version_name=_attr(root, "versionName"),
            min_sdk_version=_to_int(_attr(uses_sdk, "minSdkVersion")),
            target_sdk_version=_to_int(_attr(uses_sdk, "targetSdkVersion")),
            permissions=permissions,
            activities=components["activity"] + components["activity-alias"],
            services=components["service"],
            providers=components["provider"],
            receivers=components["receiver"],
            main_activity=main_activity,
        )

    def as_dict(self) -> dict:
        return {
            "package": self.package_name,
            "versionCode": self.version_code,
            "versionName": self.version_name,
            "minSdkVersion": self.min_sdk_version,
            "targetSdkVersion": self.target_sdk_version,
            "permissions": self.permissions,
            "activities": self.activities,
            "services": self.services,
            "providers": self.providers,
            "receivers": self.receivers,
            "mainActivity": self.main_activity,
        }
