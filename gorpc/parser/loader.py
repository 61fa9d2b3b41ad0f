"""
loader.py - Carregamento de pacotes de definicao Go

Proposito:
    Resolver padroes de entrada (diretorios, arquivos .go, dir/...) em
    pacotes compilados: arquivos parseados, escopo de declaracoes de tipo
    e caminho de import. Resolve referencias qualificadas para outros
    pacotes do mesmo modulo sob demanda.

Componentes principais:
    - SourceLoader: ponto de entrada (load, load_sources, resolve_*)
    - Package/DeclaredType: pacote carregado e declaracao de tipo no escopo
    - ExternalType: tipo de pacote fora do modulo (opaco)
    - GoModule/find_module: leitura do go.mod mais proximo

Dependencias criticas:
    - gorpc.parser.lexer: parsing com Lark
    - gorpc.parser.transformer: conversao para FileNode
    - pathlib/os: varredura de diretorios

Exemplo de uso:
    loader = SourceLoader()
    packages = loader.load(["./definitions"])
    packages[0].scope["GreeterService"].spec

Notas de implementacao:
    - Arquivos _test.go sao ignorados; diretorios testdata, .* e _* tambem.
    - Pacotes sao memorizados por diretorio e por caminho de import.
    - Imports fora do modulo nunca sao lidos do disco.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from lark.exceptions import VisitError

from gorpc.ast.nodes import FileNode, ImportNode, SourceLocation, TypeSpecNode
from gorpc.ast.results import DefinitionError, LoadError
from gorpc.parser.lexer import parse_file, parse_string, ParsedSource
from gorpc.parser.transformer import GoTransformer

logger = logging.getLogger(__name__)

PREDECLARED_TYPES = frozenset(
    {
        "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
        "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
        "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    }
)

SKIPPED_DIRECTORIES = ("testdata",)

_MODULE_LINE = re.compile(r'^\s*module\s+"?([^\s"]+)"?', re.MULTILINE)
_MAJOR_VERSION = re.compile(r"^v[0-9]+$")


@dataclass(frozen=True)
class GoModule:
    path: str
    root: Path

    def package_path(self, directory: Path) -> str:
        relative = directory.resolve().relative_to(self.root.resolve())
        if relative == Path("."):
            return self.path
        return f"{self.path}/{relative.as_posix()}"

    def contains(self, import_path: str) -> bool:
        return import_path == self.path or import_path.startswith(self.path + "/")

    def directory_for(self, import_path: str) -> Path:
        if import_path == self.path:
            return self.root
        return self.root.joinpath(*import_path[len(self.path) + 1:].split("/"))


def find_module(directory: Path) -> Optional[GoModule]:
    """Procura o go.mod mais proximo subindo a partir do diretorio."""
    start = directory.resolve()
    for candidate in (start, *start.parents):
        gomod = candidate / "go.mod"
        if gomod.is_file():
            match = _MODULE_LINE.search(gomod.read_text(encoding="utf-8"))
            if match is None:
                raise LoadError(message=f"{gomod}: no module directive")
            return GoModule(path=match.group(1), root=candidate)
    return None


def default_package_name(import_path: str) -> str:
    """
    Nome presumido de um pacote externo a partir do caminho de import.

    Example:
        default_package_name("github.com/google/uuid") -> "uuid"
        default_package_name("example.com/mod/v2") -> "mod"
        default_package_name("gopkg.in/yaml.v3") -> "yaml"
    """
    segments = import_path.split("/")
    name = segments[-1]
    if _MAJOR_VERSION.match(name) and len(segments) > 1:
        name = segments[-2]
    if ".v" in name:
        base, _, version = name.rpartition(".v")
        if version.isdigit():
            name = base
    return name.replace("-", "_")


@dataclass
class DeclaredType:
    spec: TypeSpecNode
    package: "Package" = field(repr=False, compare=False)
    file: FileNode = field(repr=False, compare=False)

    @property
    def name(self) -> str:
        return self.spec.name


@dataclass(frozen=True)
class ExternalType:
    """Tipo nomeado de um pacote fora do modulo (stdlib, terceiros)."""

    name: str
    package_name: str
    path: str


ResolvedName = Union[DeclaredType, ExternalType]


@dataclass(eq=False)
class Package:
    name: str
    path: str
    files: List[FileNode]
    directory: Optional[Path] = None
    module: Optional[GoModule] = None
    scope: Dict[str, DeclaredType] = field(default_factory=dict)

    def names(self) -> List[str]:
        """Nomes declarados no escopo do pacote em ordem alfabetica."""
        return sorted(self.scope)

    def lookup(self, name: str) -> Optional[DeclaredType]:
        return self.scope.get(name)


def parse_source(parsed: ParsedSource, filename: str) -> FileNode:
    try:
        return GoTransformer(filename, parsed.comments).transform(parsed.tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, DefinitionError):
            raise exc.orig_exc from exc
        raise


def build_package(
    files: List[FileNode],
    path: Optional[str] = None,
    directory: Optional[Path] = None,
    module: Optional[GoModule] = None,
) -> Package:
    names = sorted({node.package for node in files})
    if len(names) > 1:
        where = directory or files[0].path.parent
        raise LoadError(
            message=f"found packages {names[0]} and {names[1]} in {where}",
            location=files[0].location,
        )

    package = Package(
        name=names[0],
        path=path or names[0],
        files=files,
        directory=directory,
        module=module,
    )
    for node in files:
        for spec in node.types:
            if spec.name == "_":
                continue
            if spec.name in package.scope:
                raise LoadError(
                    message=f"{spec.name} redeclared in this block",
                    location=spec.location,
                    package=package.path,
                )
            package.scope[spec.name] = DeclaredType(spec=spec, package=package, file=node)
    return package


class SourceLoader:
    """
    Carrega pacotes a partir de padroes e resolve nomes entre pacotes.

    Example:
        loader = SourceLoader()
        root = loader.load(["./definitions"])[0]
        decl = loader.resolve_name(root, root.files[0], "GreetRequest", location)
    """

    def __init__(self) -> None:
        self._by_directory: Dict[Path, Package] = {}
        self._by_path: Dict[str, Package] = {}

    # ---------- carregamento ----------

    def load(self, patterns: Sequence[str]) -> List[Package]:
        if not patterns:
            raise LoadError(message="no definition patterns given")

        packages: List[Package] = []
        go_files = [Path(pattern) for pattern in patterns if pattern.endswith(".go")]
        files_added = False
        for pattern in patterns:
            if pattern.endswith(".go"):
                if not files_added:
                    packages.append(self.load_files(go_files))
                    files_added = True
            elif pattern == "..." or pattern.endswith("/..."):
                packages.extend(self._load_tree(pattern))
            else:
                packages.append(self.load_directory(Path(pattern)))

        unique: List[Package] = []
        for package in packages:
            if package not in unique:
                unique.append(package)
        return unique

    def load_directory(self, directory: Path) -> Package:
        if not directory.is_dir():
            raise LoadError(message=f"directory {directory} does not exist")
        key = directory.resolve()
        if key in self._by_directory:
            return self._by_directory[key]

        files = sorted(
            candidate
            for candidate in directory.glob("*.go")
            if candidate.is_file() and not candidate.name.endswith("_test.go")
        )
        if not files:
            raise LoadError(message=f"no Go files in {directory}")

        package = self._parse_package(files, directory)
        self._by_directory[key] = package
        return package

    def load_files(self, paths: List[Path]) -> Package:
        for path in paths:
            if not path.is_file():
                raise LoadError(message=f"file {path} does not exist")
        directories = {path.resolve().parent for path in paths}
        directory = paths[0].parent if len(directories) == 1 else None
        return self._parse_package(paths, directory)

    def load_sources(self, sources: Mapping[str, str]) -> Package:
        """Compila um pacote a partir de conteudo em memoria (nome -> fonte)."""
        if not sources:
            raise LoadError(message="no definition sources given")
        files = [
            parse_source(parse_string(content, filename), filename)
            for filename, content in sources.items()
        ]
        package = build_package(files)
        logger.debug("loaded in-memory package %s (%d files)", package.name, len(files))
        return package

    def _load_tree(self, pattern: str) -> List[Package]:
        base = Path(pattern[: -len("...")] or ".")
        if not base.is_dir():
            raise LoadError(message=f"directory {base} does not exist")

        packages: List[Package] = []
        for current, dirnames, filenames in os.walk(base):
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in SKIPPED_DIRECTORIES and not name.startswith((".", "_"))
            )
            if any(name.endswith(".go") and not name.endswith("_test.go") for name in filenames):
                packages.append(self.load_directory(Path(current)))
        if not packages:
            raise LoadError(message=f"pattern {pattern} matched no packages")
        return packages

    def _parse_package(self, files: Iterable[Path], directory: Optional[Path]) -> Package:
        nodes = [parse_source(parse_file(path), str(path)) for path in files]
        module = find_module(directory) if directory is not None else None
        path = module.package_path(directory) if module is not None else None
        package = build_package(nodes, path=path, directory=directory, module=module)
        self._by_path.setdefault(package.path, package)
        logger.debug("loaded package %s from %s (%d files)", package.path, directory, len(nodes))
        return package

    def load_import(self, importer: Package, import_path: str, location: SourceLocation) -> Package:
        if import_path in self._by_path:
            return self._by_path[import_path]
        if importer.module is None or not importer.module.contains(import_path):
            raise LoadError(
                message=f"package {import_path} is not part of the module",
                location=location,
                package=importer.path,
            )
        directory = importer.module.directory_for(import_path)
        if not directory.is_dir():
            raise LoadError(
                message=f"cannot find package {import_path} in {directory}",
                location=location,
                package=importer.path,
            )
        package = self.load_directory(directory)
        self._by_path[import_path] = package
        return package

    # ---------- resolucao de nomes ----------

    def is_module_import(self, importer: Package, import_path: str) -> bool:
        return importer.module is not None and importer.module.contains(import_path)

    def import_name(self, importer: Package, spec: ImportNode) -> str:
        if spec.alias and spec.alias not in ("_", "."):
            return spec.alias
        if self.is_module_import(importer, spec.path):
            return self.load_import(importer, spec.path, spec.location).name
        return default_package_name(spec.path)

    def resolve_qualified(
        self,
        package: Package,
        file: FileNode,
        qualifier: str,
        name: str,
        location: SourceLocation,
    ) -> ResolvedName:
        """Resolve `qualifier.Name` pelos imports do arquivo onde aparece."""
        for spec in file.imports:
            if spec.alias in ("_", "."):
                continue
            if self.import_name(package, spec) != qualifier:
                continue
            if not self.is_module_import(package, spec.path):
                return ExternalType(
                    name=name,
                    package_name=default_package_name(spec.path),
                    path=spec.path,
                )
            target = self.load_import(package, spec.path, spec.location)
            return self._exported(target, name, f"{qualifier}.{name}", location, package)

        raise LoadError(message=f"undefined: {qualifier}", location=location, package=package.path)

    def resolve_name(
        self,
        package: Package,
        file: FileNode,
        name: str,
        location: SourceLocation,
    ) -> Optional[DeclaredType]:
        """
        Resolve um identificador nao qualificado.

        Returns:
            A declaracao encontrada, ou None para tipos predeclarados
            (string, int, error, ...).
        """
        decl = package.lookup(name)
        if decl is not None:
            return decl

        for spec in file.imports:
            if spec.alias == "." and self.is_module_import(package, spec.path):
                target = self.load_import(package, spec.path, spec.location)
                if name in target.scope:
                    return self._exported(target, name, name, location, package)

        if name in PREDECLARED_TYPES:
            return None
        raise LoadError(message=f"undefined: {name}", location=location, package=package.path)

    def _exported(
        self,
        target: Package,
        name: str,
        display: str,
        location: SourceLocation,
        importer: Package,
    ) -> DeclaredType:
        if not name[:1].isupper():
            raise LoadError(
                message=f"name {name} not exported by package {target.name}",
                location=location,
                package=importer.path,
            )
        decl = target.lookup(name)
        if decl is None:
            raise LoadError(message=f"undefined: {display}", location=location, package=importer.path)
        return decl
