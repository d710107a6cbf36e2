#!/usr/bin/env python3
"""
Logging setup with optional WandB metric mirroring
"""

import logging
import os
import sys
from typing import Optional

import wandb


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(log_level: str = "INFO") -> None:
    """Attach a console handler to the root logger once"""
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    if not any(getattr(h, "_gateway_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._gateway_handler = True
        root.addHandler(handler)


class GatewayLogger:
    """Logger wrapper that can mirror metrics to WandB"""

    def __init__(
        self,
        name: str,
        log_level: str = "INFO",
        use_wandb: bool = False,
        wandb_project: str = "vault-gateway",
        wandb_entity: Optional[str] = None
    ):
        self.name = name
        self.use_wandb = use_wandb

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        if self.use_wandb:
            self._setup_wandb(wandb_project, wandb_entity)

    def _setup_wandb(self, project: str, entity: Optional[str]):
        """Setup WandB logging"""
        if os.getenv("WANDB_MODE") == "disabled":
            self.use_wandb = False
            self.logger.info("WandB disabled via WANDB_MODE environment variable")
            return
        try:
            wandb.init(
                project=project,
                entity=entity,
                name=f"{self.name}_{os.getpid()}",
                config={"component": self.name},
                tags=[self.name, "vault-gateway"]
            )
            self.logger.info(f"WandB initialized for project: {project}")
        except Exception as e:
            self.logger.warning(f"Failed to initialize WandB: {e}")
            self.use_wandb = False

    def log_metrics(self, metrics: dict, step: Optional[int] = None):
        """Log metrics to both console and WandB"""
        metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
        self.logger.info(f"Metrics: {metrics_str}")

        if self.use_wandb:
            try:
                wandb.log(metrics, step=step)
            except Exception as e:
                self.logger.warning(f"Failed to log to WandB: {e}")


def get_logger(
    name: str,
    log_level: str = "INFO",
    use_wandb: bool = False,
    wandb_project: str = "vault-gateway"
) -> GatewayLogger:
    """Get configured logger instance"""
    return GatewayLogger(
        name=name,
        log_level=log_level,
        use_wandb=use_wandb,
        wandb_project=wandb_project
    )
