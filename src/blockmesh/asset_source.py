"""
Asset lookup over a resource tree laid out as assets/<namespace>/{blockstates,models,textures}.

The tree can be a directory or a zip archive (a resource pack or client jar).
Parsed blockstates and model definitions are cached per source.
"""

import abc
import json
import logging
import os
import zipfile

from blockmesh.blockstate import MultipartCase, parse_blockstate_json
from blockmesh.errors import CycleError, NotFoundError, ParseError
from blockmesh.locations import blockstate_file, model_file, normalize_location, texture_location
from blockmesh.models import ModelDefinition
from blockmesh.settings import ANIMATION_SIDECAR_EXT, ASSETS_DIR, DEFAULT_NAMESPACE, TEXTURE_FOLDERS

logger = logging.getLogger(__name__)


class AssetSource(abc.ABC):
    """Subclasses provide _read(rel) -> bytes | None and _names() -> iterable of relative paths."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace
        self._blockstate_cache: dict[str, list[MultipartCase]] = {}
        self._model_cache: dict[str, ModelDefinition] = {}

    @abc.abstractmethod
    def _read(self, rel: str) -> bytes | None:
        ...

    @abc.abstractmethod
    def _names(self):
        ...

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _load_json(self, rel: str, what: str):
        raw = self._read(rel)
        if raw is None:
            raise NotFoundError(f'{what} not found', path=rel)
        try:
            return json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            raise ParseError(f'invalid JSON in {what}: {err}', path=rel) from err

    def load_blockstates(self, name: str) -> list[MultipartCase]:
        name = normalize_location(name, self.namespace)
        if name in self._blockstate_cache:
            return self._blockstate_cache[name]

        rel = blockstate_file(name, self.namespace)
        cases = parse_blockstate_json(self._load_json(rel, f'blockstate {name}'), rel, self.namespace)
        self._blockstate_cache[name] = cases
        return cases

    def load_block_model(self, ref: str) -> ModelDefinition:
        location = normalize_location(ref, self.namespace)
        if location in self._model_cache:
            return self._model_cache[location]

        rel = model_file(location, self.namespace)
        model = ModelDefinition.from_json(location, self._load_json(rel, f'model {location}'), self.namespace)
        self._model_cache[location] = model
        return model

    def load_block_model_recursive(self, ref: str) -> list[ModelDefinition]:
        """Returns [requested, parent, grandparent, ...]."""
        chain = []
        seen = set()
        location = normalize_location(ref, self.namespace)
        while location is not None:
            if location in seen:
                names = ' -> '.join([m.location for m in chain] + [location])
                raise CycleError(f'model parent cycle {names}', path=model_file(location, self.namespace))
            seen.add(location)
            try:
                model = self.load_block_model(location)
            except NotFoundError as err:
                if chain:
                    err.message = f'parent of {chain[-1].location} not found'
                raise
            chain.append(model)
            location = model.parent
        return chain

    def iter_textures(self):
        """Yield (location, png bytes, animated) for every texture in TEXTURE_FOLDERS, sorted by location."""
        names = set(self._names())
        found = []
        for rel in names:
            location = texture_location(rel)
            if location is None:
                continue
            folder = location.split(':', 1)[1].split('/', 1)[0]
            if folder not in TEXTURE_FOLDERS:
                continue
            found.append((location, rel))

        for location, rel in sorted(found):
            animated = rel + ANIMATION_SIDECAR_EXT in names
            yield location, self._read(rel), animated


class DirectoryAssetSource(AssetSource):
    def __init__(self, root: str, namespace: str = DEFAULT_NAMESPACE):
        super().__init__(namespace)
        self.root = root

    def _read(self, rel):
        path = os.path.join(self.root, *rel.split('/'))
        if not os.path.isfile(path):
            return None
        with open(path, 'rb') as f:
            return f.read()

    def _names(self):
        assets = os.path.join(self.root, 'assets')
        for dirpath, _, filenames in os.walk(assets):
            for filename in filenames:
                full = os.path.join(dirpath, filename)
                yield os.path.relpath(full, self.root).replace(os.sep, '/')


class ZipAssetSource(AssetSource):
    def __init__(self, path: str, namespace: str = DEFAULT_NAMESPACE):
        super().__init__(namespace)
        self.path = path
        self.zip = zipfile.ZipFile(path)
        self._namelist = set(self.zip.namelist())

    def _read(self, rel):
        if rel not in self._namelist:
            return None
        with self.zip.open(rel) as f:
            return f.read()

    def _names(self):
        return self._namelist

    def close(self):
        self.zip.close()


def open_asset_source(path: str = ASSETS_DIR, namespace: str = DEFAULT_NAMESPACE) -> AssetSource:
    if os.path.isdir(path):
        source = DirectoryAssetSource(path, namespace)
    elif zipfile.is_zipfile(path):
        source = ZipAssetSource(path, namespace)
    else:
        raise NotFoundError('asset source is neither a directory nor a zip archive', path=path)
    logger.info('opened asset source %s (%s)', path, type(source).__name__)
    return source
