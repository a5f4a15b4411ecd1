"""
Built-in resolver catalog.

Provides the ordered list of public DNS resolvers that are probed
when no explicit selection is made.
"""

from .models import Candidate


# Catalog order is significant: it breaks latency ties during ranking.
RESOLVERS: dict[str, Candidate] = {
    # Cloudflare - known for speed and privacy
    "cloudflare": Candidate("Cloudflare Primary", "1.1.1.1", "Cloudflare's privacy-focused DNS resolver"),
    "cloudflare-secondary": Candidate("Cloudflare Secondary", "1.0.0.1", "Cloudflare's secondary DNS resolver"),
    # Google - most popular, highly reliable
    "google": Candidate("Google Primary", "8.8.8.8", "Google Public DNS"),
    "google-secondary": Candidate("Google Secondary", "8.8.4.4", "Google Public DNS secondary"),
    # Quad9 - security focused, blocks malicious domains
    "quad9": Candidate("Quad9 Primary", "9.9.9.9", "Quad9 with malware blocking"),
    "quad9-secondary": Candidate("Quad9 Secondary", "149.112.112.112", "Quad9 secondary"),
    # OpenDNS - Cisco owned, extensive filtering
    "opendns": Candidate("OpenDNS Primary", "208.67.222.222", "Cisco OpenDNS"),
    "opendns-secondary": Candidate("OpenDNS Secondary", "208.67.220.220", "Cisco OpenDNS secondary"),
    # AdGuard - ad blocking, no logging
    "adguard": Candidate("AdGuard Primary", "94.140.14.14", "AdGuard DNS with ad blocking"),
    "adguard-secondary": Candidate("AdGuard Secondary", "94.140.15.15", "AdGuard DNS secondary"),
    # CleanBrowsing - family friendly filtering
    "cleanbrowsing": Candidate("CleanBrowsing Primary", "185.228.168.9", "CleanBrowsing security filter"),
    "cleanbrowsing-secondary": Candidate("CleanBrowsing Secondary", "185.228.169.9", "CleanBrowsing security filter secondary"),
    # Level3/CenturyLink - enterprise grade
    "level3": Candidate("Level3 Primary", "4.2.2.1", "Level3/CenturyLink"),
    "level3-secondary": Candidate("Level3 Secondary", "4.2.2.2", "Level3/CenturyLink secondary"),
    # Comodo Secure - security focused
    "comodo": Candidate("Comodo Primary", "8.26.56.26", "Comodo Secure DNS"),
    "comodo-secondary": Candidate("Comodo Secondary", "8.20.247.20", "Comodo Secure DNS secondary"),
    # Verisign - enterprise reliability
    "verisign": Candidate("Verisign Primary", "64.6.64.6", "Verisign Public DNS"),
    "verisign-secondary": Candidate("Verisign Secondary", "64.6.65.6", "Verisign Public DNS secondary"),
    # NextDNS - cloud-based, customizable
    "nextdns": Candidate("NextDNS", "45.90.28.167", "NextDNS (requires configuration ID for full features)"),
}


def default_catalog() -> list[Candidate]:
    """The full built-in catalog, in probing order."""
    return list(RESOLVERS.values())


def get_candidate(name: str) -> Candidate:
    """Get a catalog entry by key (case-insensitive)."""
    key = name.lower()
    if key in RESOLVERS:
        return RESOLVERS[key]
    raise ValueError(f"Unknown resolver: {name}. Available: {list(RESOLVERS.keys())}")


def create_custom_candidate(address: str, name: str = "Custom") -> Candidate:
    """Create a candidate for an address outside the catalog."""
    return Candidate(
        name=name,
        address=address,
        description=f"Custom resolver at {address}",
    )


def list_candidates() -> list[str]:
    """List all catalog keys."""
    return list(RESOLVERS.keys())
