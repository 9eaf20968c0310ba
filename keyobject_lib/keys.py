SEPARATOR = "::"


def qualify_id(domain: str, id: str = "") -> str:
    """Return `id` prefixed with `domain::`.

    Prefixing is idempotent: an id that already starts with the domain is
    returned unchanged. With the empty domain every id is returned as-is.
    """
    return id if id.startswith(domain) else domain + SEPARATOR + id


def sub_domain_name(domain: str, name: str) -> str:
    return domain + SEPARATOR + name


def prefix_scope(domain: str, prefix: str | None = None) -> str:
    """Resolve the id prefix used for a prefix scan inside `domain`.

    An empty prefix scans the whole domain (bare domain, no separator).
    """
    if not prefix:
        return domain
    return qualify_id(domain, prefix)
