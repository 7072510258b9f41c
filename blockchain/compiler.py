"""
Contract Compiler
Compiles Solidity sources with py-solc-x and writes Hardhat-style artifacts
"""

import os
import re
import json
import hashlib
from typing import Dict, List, Optional, Tuple
from loguru import logger
import solcx
from solcx.exceptions import SolcError

from deployer.settings import CompilerSettings

Version = Tuple[int, int, int]

PRAGMA_RE = re.compile(r"pragma\s+solidity\s+([^;]+);")
CONSTRAINT_RE = re.compile(r"(\^|~|>=|<=|>|<|=)?\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


class CompilationError(RuntimeError):
    """Raised when a source cannot be compiled with the configured compilers"""


def parse_version(version: str) -> Version:
    parts = [int(p) for p in version.strip().lstrip('v').split('.')]
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts[:3])


def _satisfies(version: Version, op: str, target: Version, given_parts: int) -> bool:
    if op == '^':
        # ^0.8.0 -> >=0.8.0 <0.9.0, ^1.2.3 -> >=1.2.3 <2.0.0
        if target[0] > 0:
            upper = (target[0] + 1, 0, 0)
        elif target[1] > 0 or given_parts < 3:
            upper = (0, target[1] + 1, 0)
        else:
            upper = (0, 0, target[2] + 1)
        return target <= version < upper
    if op == '~':
        upper = (target[0] + 1, 0, 0) if given_parts == 1 else (target[0], target[1] + 1, 0)
        return target <= version < upper
    if op == '>=':
        return version >= target
    if op == '>':
        return version > target
    if op == '<=':
        return version <= target
    if op == '<':
        return version < target
    if given_parts < 3:
        return version[:given_parts] == target[:given_parts]
    return version == target


def version_satisfies(version: str, pragma: str) -> bool:
    """
    Check a compiler version against a pragma expression
    
    Args:
        version: e.g. "0.8.2"
        pragma: e.g. "^0.8.0", ">=0.6.0 <0.8.0", "0.7.0"
    
    Returns:
        True if every constraint in the expression is met
    """
    candidate = parse_version(version)
    
    for alternative in pragma.split('||'):
        constraints = CONSTRAINT_RE.findall(alternative)
        if not constraints:
            continue
        
        ok = True
        for op, major, minor, patch in constraints:
            given = [p for p in (major, minor, patch) if p != '']
            target = parse_version('.'.join(given))
            if not _satisfies(candidate, op or '=', target, len(given)):
                ok = False
                break
        
        if ok:
            return True
    
    return False


def select_compiler_version(pragma: str, versions: List[str]) -> str:
    """
    Pick the highest configured version that satisfies the pragma
    
    Raises:
        CompilationError: no configured version matches
    """
    matching = [v for v in versions if version_satisfies(v, pragma)]
    
    if not matching:
        raise CompilationError(
            f"No configured compiler satisfies 'pragma solidity {pragma}' "
            f"(configured: {', '.join(versions)})"
        )
    
    return max(matching, key=parse_version)


class ContractCompiler:
    """
    Compiles every source under the sources directory
    """
    
    def __init__(self, settings: CompilerSettings):
        """
        Initialize Contract Compiler
        
        Args:
            settings: Compiler versions and optimizer settings
        """
        self.settings = settings
        self.sources_dir = settings.sources_dir
        self.artifacts_dir = settings.artifacts_dir
        # Artifacts mirror the sources folder name: artifacts/contracts/X.sol/X.json
        self.sources_name = os.path.basename(os.path.normpath(settings.sources_dir))
    
    def find_sources(self) -> List[str]:
        """List Solidity sources relative to the sources directory"""
        sources = []
        
        for root, _, files in os.walk(self.sources_dir):
            for name in files:
                if name.endswith('.sol'):
                    path = os.path.join(root, name)
                    sources.append(os.path.relpath(path, self.sources_dir))
        
        return sorted(sources)
    
    def read_pragma(self, source: str) -> str:
        match = PRAGMA_RE.search(source)
        if not match:
            raise CompilationError("Source has no 'pragma solidity' directive")
        return match.group(1).strip()
    
    def ensure_installed(self, version: str):
        """Install solc version if missing"""
        installed = {str(v) for v in solcx.get_installed_solc_versions()}
        
        if version not in installed:
            logger.info(f"Installing solc {version}...")
            solcx.install_solc(version)
    
    def compile_all(self) -> Dict[str, Dict]:
        """
        Compile all sources, grouped by selected compiler version
        
        Returns:
            Contract name -> artifact dict
        """
        groups: Dict[str, Dict[str, str]] = {}
        
        for rel_path in self.find_sources():
            with open(os.path.join(self.sources_dir, rel_path), 'r') as f:
                content = f.read()
            
            version = select_compiler_version(self.read_pragma(content), list(self.settings.versions))
            groups.setdefault(version, {})[rel_path] = content
        
        if not groups:
            raise CompilationError(f"No Solidity sources found in {self.sources_dir}")
        
        artifacts = {}
        for version, sources in groups.items():
            artifacts.update(self._compile_group(version, sources))
        
        logger.success(f"Compiled {len(artifacts)} contracts")
        return artifacts
    
    def _compile_group(self, version: str, sources: Dict[str, str]) -> Dict[str, Dict]:
        self.ensure_installed(version)
        
        logger.info(f"Compiling {len(sources)} files with solc {version}")
        
        standard_input = {
            'language': 'Solidity',
            'sources': {path: {'content': content} for path, content in sources.items()},
            'settings': {
                **self.settings.solc_settings(),
                'outputSelection': {'*': {'*': ['abi', 'evm.bytecode.object']}}
            }
        }
        
        try:
            output = solcx.compile_standard(
                standard_input,
                solc_version=version,
                allow_paths=os.path.abspath(self.sources_dir)
            )
        except SolcError as e:
            raise CompilationError(f"solc {version} failed: {e}") from e
        
        artifacts = {}
        for source_path, contracts in output.get('contracts', {}).items():
            for contract_name, data in contracts.items():
                artifact = {
                    'contractName': contract_name,
                    'sourceName': f"{self.sources_name}/{source_path}",
                    'abi': data['abi'],
                    'bytecode': '0x' + data['evm']['bytecode']['object'],
                    'compiler': version,
                    'sourceHash': self.source_hash(sources[source_path])
                }
                self._write_artifact(source_path, contract_name, artifact)
                artifacts[contract_name] = artifact
        
        return artifacts
    
    def source_hash(self, content: str) -> str:
        """Hash of a source together with the optimizer settings it is compiled with"""
        settings = json.dumps(self.settings.solc_settings(), sort_keys=True)
        return hashlib.sha256((settings + content).encode('utf-8')).hexdigest()
    
    def is_current(self, artifact: Dict) -> bool:
        """Check an artifact was built from the source as it is now"""
        source_path = artifact.get('sourceName', '').split('/', 1)[-1]
        path = os.path.join(self.sources_dir, source_path)
        
        if not os.path.isfile(path):
            return False
        
        with open(path, 'r') as f:
            return artifact.get('sourceHash') == self.source_hash(f.read())
    
    def artifact_path(self, contract_name: str, source_path: Optional[str] = None) -> str:
        source_file = os.path.basename(source_path) if source_path else f"{contract_name}.sol"
        return os.path.join(
            self.artifacts_dir, self.sources_name, source_file, f"{contract_name}.json"
        )
    
    def _write_artifact(self, source_path: str, contract_name: str, artifact: Dict):
        path = self.artifact_path(contract_name, source_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        
        with open(path, 'w') as f:
            json.dump(artifact, f, indent=2)
        
        logger.debug(f"Wrote artifact {path}")
    
    def get_artifact(self, contract_name: str) -> Dict:
        """
        Load a contract artifact, compiling first if it is missing or its source changed
        
        Raises:
            CompilationError: contract not found after compiling
        """
        path = self.artifact_path(contract_name)
        
        if os.path.exists(path):
            with open(path, 'r') as f:
                artifact = json.load(f)
            
            if self.is_current(artifact):
                return artifact
            
            logger.info(f"{contract_name} source changed, recompiling")
        
        artifacts = self.compile_all()
        
        if contract_name not in artifacts:
            raise CompilationError(f"Contract {contract_name} not found in {self.sources_dir}")
        
        return artifacts[contract_name]
