"""
Builds the artifact from source with the external build tool.
"""

import logging
import os
import shutil
import subprocess
import threading
from typing import Callable, Optional, TextIO

from dynget.dynget_config import DyngetConfig
from dynget.dynget_exceptions import BuildError
from dynget.dynget_logger import DyngetLogger
from dynget.dynget_settings import DyngetSettings
from dynget.dynget_utils import FileUtils
from dynget.platform_resolver import PlatformResolver

OutputSink = Callable[[str], None]


class ArtifactBuilder:
    """
    Runs the build command in a source checkout and moves the produced
    library to the canonical artifact location.
    """

    def __init__(
        self,
        config: DyngetConfig,
        logger: DyngetLogger,
        resolver: Optional[PlatformResolver] = None,
        output_sink: Optional[OutputSink] = None,
    ):
        """
        Args:
            config: Build command, build timeout and install directory
            logger: Logger for progress and error messages
            resolver: Platform naming, defaults to the running platform
            output_sink: Receives each line of build output; defaults to the logger
        """
        self.config = config
        self.logger = logger
        self.resolver = resolver or PlatformResolver(config.artifact_name)
        self.output_sink = output_sink or (lambda line: self.logger.log(line, logging.INFO))

    def build(self, source_dir: str, target_dir: Optional[str] = None) -> str:
        """
        Build the artifact in source_dir and install it into target_dir
        (the configured install directory by default).

        Returns:
            Path of the installed artifact

        Raises:
            BuildError: If the build fails, times out, or produces no artifact
        """
        target_dir = target_dir or self.config.install_dir
        command = list(self.config.build_command)

        self.logger.log(f"Building in {source_dir}: {' '.join(command)}", logging.INFO)
        returncode = self._run(command, source_dir)
        if returncode != 0:
            raise BuildError(
                f"Build command {' '.join(command)} exited with status {returncode}",
                returncode=returncode,
            )

        output_path = os.path.join(
            source_dir, *DyngetSettings.BUILD_OUTPUT_DIR, self.resolver.build_output_filename
        )
        if not os.path.isfile(output_path):
            raise BuildError(f"Build succeeded but {output_path} was not produced", returncode=0)

        os.makedirs(target_dir, exist_ok=True)
        target_path = os.path.join(target_dir, self.resolver.artifact_filename)
        FileUtils.remove(target_path, self.logger)
        try:
            shutil.move(output_path, target_path)
        except OSError as e:
            raise BuildError(f"Could not move {output_path} to {target_path}: {e}", returncode=0) from e

        FileUtils.remove(
            os.path.join(source_dir, DyngetSettings.BUILD_INTERMEDIATE_DIR), self.logger
        )
        self.logger.log(f"Built {target_path}", logging.INFO)
        return target_path

    def _run(self, command, cwd: str) -> int:
        try:
            process = subprocess.Popen(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise BuildError(f"Could not start build command {command[0]}: {e}") from e

        pump = threading.Thread(target=self._pump_output, args=(process.stdout,), daemon=True)
        pump.start()
        try:
            return process.wait(timeout=self.config.build_timeout)
        except subprocess.TimeoutExpired as e:
            process.kill()
            process.wait()
            raise BuildError(
                f"Build did not finish within {self.config.build_timeout} seconds"
            ) from e
        finally:
            pump.join(timeout=5)

    def _pump_output(self, stream: TextIO) -> None:
        with stream:
            for line in stream:
                self.output_sink(line.rstrip("\r\n"))
