import ipaddress
import socket
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import psutil

LOOPBACK_IP = "127.0.0.1"

PRIVATE_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("100.64.0.0/10"),  # CGNAT, used by Tailscale and other mesh VPNs
]


class InterfaceClass(Enum):
    LOOPBACK = "Loopback"
    ETHERNET = "Ethernet"
    WIFI = "WiFi"
    BRIDGE = "Bridge"
    VIRTUAL = "Virtual"
    DOCKER = "Docker"
    TUNNEL = "Tunnel"
    OTHER = "Other"


# Checked in order; first matching prefix wins.
_PREFIX_CLASSES = [
    (("tailscale", "utun"), InterfaceClass.TUNNEL),
    (("en",), InterfaceClass.ETHERNET),
    (("wi",), InterfaceClass.WIFI),
    (("bridge",), InterfaceClass.BRIDGE),
    (("vbox", "vmnet"), InterfaceClass.VIRTUAL),
    (("docker",), InterfaceClass.DOCKER),
]


@dataclass(frozen=True)
class InterfaceDescriptor:
    """One bindable IPv4 address and what kind of interface it lives on."""
    ip: str
    interface_name: str
    interface_class: InterfaceClass
    is_public: bool
    description: str


def classify_interface(interface_name: str) -> InterfaceClass:
    name = interface_name.lower()
    for prefixes, interface_class in _PREFIX_CLASSES:
        if name.startswith(prefixes):
            return interface_class
    return InterfaceClass.OTHER


def is_public_ip(ip: str) -> bool:
    """False for RFC 1918 and CGNAT addresses, True for everything else."""
    address = ipaddress.ip_address(ip)
    return not any(address in network for network in PRIVATE_NETWORKS)


def describe_interface(interface_name: str, interface_class: InterfaceClass, ip: str, is_public: bool) -> str:
    type_label = f" ({interface_class.value})" if interface_class != InterfaceClass.OTHER else ""
    public_warning = " ⚠️ Public" if is_public else ""
    return f"{interface_name}{type_label} - {ip}{public_warning}"


def _loopback_descriptor() -> InterfaceDescriptor:
    return InterfaceDescriptor(
        ip=LOOPBACK_IP,
        interface_name="lo",
        interface_class=InterfaceClass.LOOPBACK,
        is_public=False,
        description=f"Localhost ({LOOPBACK_IP})",
    )


def _is_skipped(ip: str) -> bool:
    return ip.startswith("127.") or ip.startswith("169.254.")


def list_interfaces() -> List[InterfaceDescriptor]:
    """
    Snapshot of the addresses the server could bind to.

    Localhost always comes first, then private addresses, then public ones,
    each group sorted by description. That keeps the safest choice at the top
    of any picker built from this list.
    """
    stats = psutil.net_if_stats()
    discovered = []

    for interface_name, addresses in psutil.net_if_addrs().items():
        if_stats = stats.get(interface_name)
        if if_stats is not None and not if_stats.isup:
            continue

        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            ip = address.address
            if _is_skipped(ip):
                continue

            interface_class = classify_interface(interface_name)
            public = is_public_ip(ip)
            discovered.append(InterfaceDescriptor(
                ip=ip,
                interface_name=interface_name,
                interface_class=interface_class,
                is_public=public,
                description=describe_interface(interface_name, interface_class, ip, public),
            ))

    discovered.sort(key=lambda d: (d.is_public, d.description))
    return [_loopback_descriptor()] + discovered


def find_interface(ip: str) -> Optional[InterfaceDescriptor]:
    """The current descriptor for ip, or None if no interface carries it."""
    for descriptor in list_interfaces():
        if descriptor.ip == ip:
            return descriptor
    return None
