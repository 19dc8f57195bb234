"""
Entrypoint for running a simulation

Example:
```
python -m kubesim --config cluster.json --ticks 100 --log_level debug
```
Runs until the tick limit is reached, or until interrupted (SIGINT/SIGTERM)
"""

import logging
import logging.config
import signal

import fire

from kubesim.config import read_config
from kubesim.logconfig import logging_config, set_level
from kubesim.sim import KubeSim
from kubesim.ticker import CancelToken

logger = logging.getLogger("kubesim.main")


def install_signal_handlers(token: CancelToken) -> None:
    def handler(signum: int, frame) -> None:
        token.cancel(f"received {signal.Signals(signum).name}")

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)


def main(config: str, ticks: int | None = None, log_level: str | None = None) -> None:
    logging.config.dictConfig(logging_config)
    conf = read_config(config)
    set_level(log_level or conf.log_level)
    logger.debug(f"config: {conf}")

    sim = KubeSim.from_config(conf)
    token = CancelToken()
    install_signal_handlers(token)
    cause = sim.run(token, max_ticks=ticks)

    logger.info(f"simulation stopped at {sim.clock}: {cause}")
    for node in sim.registry:
        logger.info(f"{node!r} runs {len(node.workloads)} workloads")
    logger.info(f"{len(sim.bindings)} bound, {len(sim.unschedulable)} unschedulable, {len(sim.pods)} pending")


if __name__ == "__main__":
    fire.Fire(main)
