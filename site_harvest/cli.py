#!/usr/bin/env python3
"""
Точка входа для запуска краулера SiteHarvest через командную строку.

Команды:
  crawl     Обойти сайт по конфигу и вывести/сохранить извлечённые страницы
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --seed URL          Корневой URL (override seed_url)
  --limit INT         Макс. число страниц (override max_pages)
  --depth INT         Макс. глубина обхода (override max_depth)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --json PATH          Сохранить JSON-отчёт в файл
  --html PATH          Сохранить HTML-отчёт в файл
  --template DIR       Папка с Jinja2-шаблонами (по умолчанию встроенный шаблон)
  --pretty             Преформатировать JSON-вывод (отступ 2)
  --crawl-timeout SEC  Общий таймаут обхода (секунд)

Дополнительно:
  --version, -v       Показать версию SiteHarvest

Пример:
  site-harvest --config configs/default.yaml --limit 100 crawl --json report.json
"""
import asyncio
import sys
from pathlib import Path

import click

from site_harvest import __version__
from site_harvest.aggregator import aggregate_results
from site_harvest.config import load_config
from site_harvest.engine import start_crawl
from site_harvest.errors import ConfigurationError
from site_harvest.logger import DEFAULT_FORMAT, configure, logger
from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import render_json
from site_harvest.storage import InMemoryPageStore

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option('--seed', 'seed_url', default=None, help='Корневой URL (override seed_url)')
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число страниц для обхода (override max_pages)'
)
@click.option(
    '--depth', '-d', 'depth',
    type=click.IntRange(min=0),
    default=None,
    help='Макс. глубина обхода (override max_depth)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, seed_url, limit, depth, log_level, log_file, log_format):
    """Группа команд SiteHarvest CLI."""
    configure(level=log_level, log_file=log_file, log_format=log_format)
    try:
        cfg = load_config(config_path, seed_url=seed_url, max_pages=limit, max_depth=depth)
    except (ConfigurationError, FileNotFoundError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Общий таймаут обхода (секунд)'
)
@click.pass_context
def crawl(ctx, json_output, html_output, template_dir, pretty, crawl_timeout):
    """Обойти сайт и сгенерировать отчёты."""
    cfg = ctx.obj['config']
    store = InMemoryPageStore()
    logger.info('Starting crawl with config: %s', cfg.seed)
    try:
        if crawl_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_crawl(cfg, store), timeout=crawl_timeout)
            )
        else:
            result = asyncio.run(start_crawl(cfg, store))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    report = aggregate_results(result)

    # Если не сохраняем в файл — печатаем в stdout
    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
