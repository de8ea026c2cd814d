"""Command-line interface for sending a single chat completion."""

import asyncio
import dataclasses
import json
import sys

import click

from .client import ChatClient
from .config.loader import ConfigLoader
from .credentials import environment_credential
from .exceptions import ChatClientError
from .logging import configure_logging
from .models import ClientConfig


@click.command()
@click.argument("user_prompt")
@click.option(
    "--system",
    default="You are a helpful assistant.",
    show_default=True,
    help="System instruction sent before the user prompt",
)
@click.option("--model", default="gpt-4o-mini", show_default=True, help="Model identifier")
@click.option("--temperature", type=float, default=0.0, show_default=True)
@click.option(
    "--json",
    "json_mode",
    is_flag=True,
    help="Ask for a single JSON object and pretty-print the decoded reply",
)
@click.option("--base-url", help="Endpoint base URL (overrides the config file)")
@click.option("--timeout", type=float, help="Per-attempt timeout in seconds")
@click.option("--max-retries", type=click.IntRange(min=0), help="Retries after the first attempt")
@click.option(
    "--config-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Directory holding client configuration files",
)
@click.option(
    "--config-name",
    default="default-client",
    show_default=True,
    help="Configuration file to load from --config-dir (without .yaml)",
)
@click.option(
    "--api-key-env",
    default="OPENAI_API_KEY",
    show_default=True,
    help="Environment variable holding the API key",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
def main(
    user_prompt,
    system,
    model,
    temperature,
    json_mode,
    base_url,
    timeout,
    max_retries,
    config_dir,
    config_name,
    api_key_env,
    verbose,
):
    """Send USER_PROMPT to a chat-completions endpoint and print the reply.

    The reply goes to stdout; the request status and logs go to stderr.
    """
    configure_logging(
        log_level="DEBUG" if verbose else "WARNING",
        structured=False,
    )

    try:
        config = _build_config(config_dir, config_name, base_url, timeout, max_retries)
        reply, status = asyncio.run(
            _run(config, model, api_key_env, system, user_prompt, temperature, json_mode)
        )
    except ChatClientError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_mode:
        click.echo(json.dumps(reply, indent=2, ensure_ascii=False))
    else:
        click.echo(reply)
    click.echo(str(status), err=True)


def _build_config(config_dir, config_name, base_url, timeout, max_retries) -> ClientConfig:
    config = ConfigLoader(config_dir).load_config(config_name) if config_dir else ClientConfig()
    overrides = {"base_url": base_url, "timeout": timeout, "max_retries": max_retries}
    return dataclasses.replace(
        config, **{key: value for key, value in overrides.items() if value is not None}
    )


async def _run(config, model, api_key_env, system, user_prompt, temperature, json_mode):
    async with ChatClient(
        model,
        api_key_provider=environment_credential(api_key_env),
        config=config,
    ) as client:
        if json_mode:
            return await client.request_json(system, user_prompt, temperature=temperature)
        return await client.request(system, user_prompt, temperature=temperature)


if __name__ == "__main__":
    main()
