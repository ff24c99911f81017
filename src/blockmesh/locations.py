from blockmesh.settings import DEFAULT_NAMESPACE


def split_location(ref: str, namespace: str = DEFAULT_NAMESPACE) -> tuple[str, str]:
    """'minecraft:block/stone' -> ('minecraft', 'block/stone'); bare paths take the default namespace."""
    if ':' in ref:
        ns, path = ref.split(':', 1)
        return ns or namespace, path
    return namespace, ref


def normalize_location(ref: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    ns, path = split_location(ref, namespace)
    return f'{ns}:{path}'


def model_file(ref: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    ns, path = split_location(ref, namespace)
    return f'assets/{ns}/models/{path}.json'


def blockstate_file(name: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    ns, path = split_location(name, namespace)
    return f'assets/{ns}/blockstates/{path}.json'


def texture_location(rel: str) -> str | None:
    """'assets/minecraft/textures/block/stone.png' -> 'minecraft:block/stone'."""
    parts = rel.replace('\\', '/').split('/')
    if len(parts) < 5 or parts[0] != 'assets' or parts[2] != 'textures':
        return None
    if not parts[-1].endswith('.png'):
        return None
    path = '/'.join(parts[3:])[:-len('.png')]
    return f'{parts[1]}:{path}'
