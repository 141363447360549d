#!filepath: mcspice/cli.py
import signal
from pathlib import Path
from typing import Optional

import typer
from rich import print

from mcspice import AppConfig, __version__, init_logging, logs
from mcspice.observability.progress import ProgressReporter
from mcspice.parallel.executor import ParallelExecutor
from mcspice.repository.parquet_repository import ParquetResultRepository
from mcspice.request.fingerprint import fingerprint as request_fingerprint
from mcspice.request.models import SimulationRequest
from mcspice.request.range_parameter import SEED_DEFAULT, RangeParameter
from mcspice.runner.batch_runner import BatchRunner
from mcspice.runner.cancel import CancelToken
from mcspice.runner.streaming_runner import StreamingRunner
from mcspice.script.generator import ScriptGenerator, ScriptProfile
from mcspice.utils.errors import SimulationError

app = typer.Typer(help="Monte Carlo HSPICE runner")


def _load(request_file: Path, config: Optional[Path]):
    cfg = AppConfig.load(str(config) if config else None)
    init_logging(cfg.log)

    defaults = dict(cfg.request_defaults)
    defaults.setdefault("hspice_path", cfg.simulator.hspice_path)
    defaults.setdefault("hspice_options", list(cfg.simulator.hspice_options))
    request = SimulationRequest.from_file(request_file, defaults=defaults)
    return cfg, request


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def fingerprint(request_file: Path, config: Optional[Path] = typer.Option(None)):
    """
    输出请求的指纹（64 位大写 hex）
    """
    _, request = _load(request_file, config)
    print(request_fingerprint(request))


@app.command()
def script(
    request_file: Path,
    output: Path,
    profile: ScriptProfile = typer.Option(ScriptProfile.STREAMING),
    netlist_body: Optional[Path] = typer.Option(None, help="batch profile only"),
    config: Optional[Path] = typer.Option(None),
):
    """
    只生成仿真脚本，不执行
    """
    _, request = _load(request_file, config)
    body = netlist_body.read_text(encoding="utf-8") if netlist_body else None
    ScriptGenerator().generate(request, output, profile, netlist_body=body)
    print(f"[green]script written: {output}[/green]")


@app.command()
def run(
    request_file: Path,
    seeds: Optional[str] = typer.Option(None, help=f"seed range, e.g. {SEED_DEFAULT}"),
    db: Optional[str] = typer.Option(None),
    workers: Optional[int] = typer.Option(None),
    config: Optional[Path] = typer.Option(None),
):
    """
    streaming profile：执行仿真并把结果写入 parquet
    """
    cfg, request = _load(request_file, config)

    repo = ParquetResultRepository(cfg.repository.root)
    repo.use(db or cfg.repository.database)

    runner = StreamingRunner(cfg.simulator.work_root)
    cancel = CancelToken()
    progress = ProgressReporter()

    requests = (
        [request.with_seed(s) for s in RangeParameter.parse(seeds)] if seeds else [request]
    )
    print(f"[blue]Running {len(requests)} seed(s) group={request.group_id}[/blue]")

    def handle(req: SimulationRequest) -> int:
        records = runner.run(req, cancel, progress)
        repo.bulk_upsert(records)
        return len(records)

    # Ctrl-C → 协作取消，各 run 在下一行输出前退出
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.cancel())

    try:
        counts = ParallelExecutor.run(items=requests, handler=handle, max_workers=workers)
    except SimulationError as e:
        if cancel.cancelled:
            logs.warning(f"[cli] run interrupted: {e}")
            print("[yellow]interrupted[/yellow]")
            raise typer.Exit(code=130)

        cancel.cancel()
        logs.error(f"[cli] run failed: {e}")
        print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(code=1)
    finally:
        signal.signal(signal.SIGINT, previous)

    print(f"[green]{sum(counts)} records stored db={repo.db} rows={repo.count_rows()}[/green]")


@app.command()
def batch(
    request_file: Path,
    config: Optional[Path] = typer.Option(None),
):
    """
    batch profile：建立工作目录并执行，结果保存在 *.tr0@* 文件
    """
    cfg, request = _load(request_file, config)
    sim = cfg.simulator

    try:
        runner = BatchRunner(
            request,
            sim.circuit_root,
            CancelToken(),
            result_pattern=sim.result_pattern,
            link_targets=sim.link_targets,
            netlist_file=sim.netlist_file,
            output_prefix=sim.output_prefix,
        )
        group_id = runner.run_with_feedback()
    except SimulationError as e:
        logs.error(f"[cli] batch failed: {e}")
        print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(code=1)

    print(f"[green]done group={group_id} dir={runner.sim_dir}[/green]")


if __name__ == "__main__":
    app()
