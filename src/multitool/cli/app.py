"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel

from ..chat import ChatSession, Message, MessageRole
from ..output import output_path
from ..tools import (
    GroundedSearch,
    ImageTools,
    Location,
    MediaInput,
    SpeechTools,
    TaskSolver,
    VideoTools,
)
from .providers import console_debug_callback, get_client, get_provider, get_settings, get_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="multitool",
    help="Gemini chat, media generation, grounded search and live voice in the terminal",
    no_args_is_help=True,
    add_completion=True,
)
image_app = typer.Typer(help="Generate, edit and analyze images", no_args_is_help=True)
video_app = typer.Typer(help="Generate and analyze videos", no_args_is_help=True)
app.add_typer(image_app, name="image")
app.add_typer(video_app, name="video")

# Console for rich output
console = Console()

OUTPUT_DIR_OPTION = typer.Option(None, "--output-dir", "-o", help="Where generated media is written")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Show debug messages")


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


def _tool(cls, verbose: bool, output_dir: Path | None = None, **kwargs):
    """Build a tool from settings; returns (tool, settings)."""
    settings = get_settings(console, output_dir=output_dir)
    tool = cls(get_client(settings, console), **kwargs)
    if verbose:
        tool.set_debug_callback(console_debug_callback(console))
    return tool, settings


@app.command(name="ui")
def ui_command(
    history: str | None = typer.Option(
        None,
        "--history",
        "-m",
        help="Chat history: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    history_path: Path | None = typer.Option(
        None,
        "--history-path",
        help="Path for the SQLite history database"
    ),
    output_dir: Path | None = OUTPUT_DIR_OPTION,
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive TUI."""
    async def _ui():
        from ..ui import run_textual_tui

        settings = get_settings(console, history=history, history_path=history_path, output_dir=output_dir)
        client = get_client(settings, console)
        try:
            await run_textual_tui(
                client=client,
                provider=get_provider(settings, client),
                store=get_store(settings),
                output_dir=settings.output_dir,
                location=settings.location,
                log_level=log_level,
            )
        finally:
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_ui())
    except KeyboardInterrupt:
        pass


@app.command()
def chat(
    history: str | None = typer.Option(
        None,
        "--history",
        "-m",
        help="Chat history: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    history_path: Path | None = typer.Option(None, "--history-path", help="Path for the SQLite history database"),
    verbose: bool = VERBOSE_OPTION,
):
    """Interactive streaming chat."""
    async def _chat():
        settings = get_settings(console, history=history, history_path=history_path)
        client = get_client(settings, console)
        provider = get_provider(settings, client)
        store = get_store(settings)
        session = ChatSession(provider, store=store, model=settings.chat_model)

        shown = {"text": ""}

        def on_update(messages: list[Message]) -> None:
            last = messages[-1]
            if last.role != MessageRole.MODEL or not session.is_busy:
                return
            if last.text.startswith(shown["text"]):
                console.print(last.text[len(shown["text"]):], end="", markup=False, highlight=False)
            else:
                console.print("\n" + last.text, end="", markup=False, highlight=False)
            shown["text"] = last.text

        session.set_stream_callback(on_update)
        if verbose:
            debug = console_debug_callback(console)
            session.set_debug_callback(debug)
            provider.set_debug_callback(debug)

        def show_present() -> None:
            for message in session.messages:
                console.print(escape(message.format_line()))
            console.print()

        try:
            await store.connect()
            await session.load()

            console.print("[bold cyan]Gemini Chat[/bold cyan]")
            console.print("[dim]Commands: /undo, /redo, /share, /clear. Type 'exit', 'quit', or 'q' to leave[/dim]\n")
            show_present()

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ").strip()

                    if not user_input:
                        continue

                    if user_input.lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    if user_input == "/undo":
                        if not await session.undo():
                            console.print("[yellow]Nothing to undo[/yellow]")
                        show_present()
                    elif user_input == "/redo":
                        if not await session.redo():
                            console.print("[yellow]Nothing to redo[/yellow]")
                        show_present()
                    elif user_input == "/share":
                        console.print(Panel(escape(session.share_text()), title="Chat history"))
                    elif user_input == "/clear":
                        if typer.confirm("Are you sure you want to clear the chat history?"):
                            await session.clear()
                            console.print("[dim]Chat cleared.[/dim]")
                            show_present()
                    else:
                        shown["text"] = ""
                        console.print("[bold green]Gemini:[/bold green] ", end="")
                        await session.send_message(user_input)
                        if not shown["text"]:
                            console.print(session.messages[-1].text, end="", markup=False, highlight=False)
                        console.print("\n")

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break

        except Exception as e:
            _fail(e)
        finally:
            await store.disconnect()
            await provider.close()

    asyncio.run(_chat())


@image_app.command("generate")
def image_generate(
    prompt: str = typer.Argument(..., help="Description of the image"),
    aspect_ratio: str = typer.Option("1:1", "--aspect-ratio", "-a", help="1:1, 16:9, 9:16, 4:3 or 3:4"),
    output_dir: Path | None = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Generate an image from a text prompt."""
    async def _generate():
        tools, settings = _tool(ImageTools, verbose, output_dir)
        try:
            with console.status("[dim]Generating image...[/dim]"):
                images = await tools.generate(prompt, aspect_ratio=aspect_ratio)
            for image in images:
                path = image.save(output_path(settings.output_dir, "image", image.extension))
                console.print(f"[green]Saved {path}[/green]")
        except (ValueError, RuntimeError) as e:
            _fail(e)

    asyncio.run(_generate())


@image_app.command("edit")
def image_edit(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to edit"),
    prompt: str = typer.Argument(..., help="What to change"),
    output_dir: Path | None = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Edit an image with a text instruction."""
    async def _edit():
        tools, settings = _tool(ImageTools, verbose, output_dir)
        try:
            with console.status("[dim]Editing image...[/dim]"):
                edited = await tools.edit(MediaInput.from_path(image), prompt)
            path = edited.save(output_path(settings.output_dir, "edited", edited.extension))
            console.print(f"[green]Saved {path}[/green]")
        except (ValueError, RuntimeError) as e:
            _fail(e)

    asyncio.run(_edit())


@image_app.command("analyze")
def image_analyze(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to describe"),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Question about the image"),
    verbose: bool = VERBOSE_OPTION,
):
    """Describe an image."""
    async def _analyze():
        tools, _ = _tool(ImageTools, verbose)
        try:
            media = MediaInput.from_path(image)
            with console.status("[dim]Analyzing image...[/dim]"):
                text = await (tools.analyze(media, prompt) if prompt else tools.analyze(media))
            console.print(Markdown(text))
        except (ValueError, RuntimeError) as e:
            _fail(e)

    asyncio.run(_analyze())


@video_app.command("generate")
def video_generate(
    prompt: str = typer.Argument("", help="Description of the video"),
    image: Path | None = typer.Option(None, "--image", "-i", exists=True, dir_okay=False, help="Starting image"),
    aspect_ratio: str = typer.Option("16:9", "--aspect-ratio", "-a", help="16:9 (landscape) or 9:16 (portrait)"),
    output_dir: Path | None = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Generate a 720p video from a prompt and/or a starting image."""
    async def _generate():
        tools, settings = _tool(VideoTools, verbose, output_dir)
        try:
            media = MediaInput.from_path(image) if image else None
            with console.status("[dim]Starting video generation...[/dim]") as status:
                video = await tools.generate(
                    prompt,
                    image=media,
                    aspect_ratio=aspect_ratio,
                    progress=lambda message: status.update(f"[dim]{message}[/dim]"),
                )
            path = video.save(output_path(settings.output_dir, "video", ".mp4"))
            console.print(f"[green]Saved {path}[/green]")
        except (ValueError, RuntimeError) as e:
            _fail(e)

    asyncio.run(_generate())


@video_app.command("analyze")
def video_analyze(
    video: Path = typer.Argument(..., exists=True, dir_okay=False, help="Video to analyze (max 20MB)"),
    prompt: str | None = typer.Option(None, "--prompt", "-p", help="Question about the video"),
    verbose: bool = VERBOSE_OPTION,
):
    """Describe a video."""
    async def _analyze():
        tools, _ = _tool(VideoTools, verbose)
        try:
            media = MediaInput.from_path(video)
            with console.status("[dim]Analyzing video...[/dim]"):
                text = await (tools.analyze(media, prompt) if prompt else tools.analyze(media))
            console.print(Markdown(text))
        except (ValueError, RuntimeError) as e:
            _fail(e)

    asyncio.run(_analyze())


@app.command()
def speak(
    text: str = typer.Argument(..., help="Text to speak"),
    voice: str = typer.Option("Kore", "--voice", help="Kore, Puck, Charon, Fenrir or Zephyr"),
    play: bool = typer.Option(True, "--play/--no-play", help="Play the audio after saving it"),
    output_dir: Path | None = OUTPUT_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Convert text to speech and save it as a WAV file."""
    async def _speak():
        tools, settings = _tool(SpeechTools, verbose, output_dir)
        try:
            with console.status("[dim]Generating audio...[/dim]"):
                speech = await tools.synthesize(text, voice=voice)
        except (ValueError, RuntimeError) as e:
            _fail(e)
        path = speech.save_wav(output_path(settings.output_dir, "speech", ".wav"))
        console.print(f"[green]Saved {path}[/green] [dim]({speech.duration:.1f}s)[/dim]")
        return speech

    speech = asyncio.run(_speak())
    if play:
        from ..audio import AudioPlayer

        player = AudioPlayer(sample_rate=speech.sample_rate)
        try:
            player.start()
            player.enqueue(speech.samples())
            player.wait(timeout=speech.duration + 2)
        except Exception as e:
            console.print(f"[yellow]Warning: audio playback unavailable ({e})[/yellow]")
        finally:
            player.close()


@app.command()
def search(
    query: str = typer.Argument(..., help="Question to answer"),
    maps: bool = typer.Option(False, "--maps", help="Ground in Google Maps instead of Google Search"),
    latitude: float | None = typer.Option(None, "--lat", help="Latitude for Maps search"),
    longitude: float | None = typer.Option(None, "--lng", help="Longitude for Maps search"),
    verbose: bool = VERBOSE_OPTION,
):
    """Answer a question grounded in Google Search or Google Maps."""
    async def _search():
        tool, settings = _tool(GroundedSearch, verbose)
        try:
            location = settings.location
            if latitude is not None and longitude is not None:
                location = Location(latitude=latitude, longitude=longitude)
            with console.status("[dim]Searching...[/dim]"):
                result = await tool.search(query, mode="maps" if maps else "web", location=location)
        except (ValueError, RuntimeError) as e:
            _fail(e)

        console.print(Markdown(result.text))
        if result.sources:
            console.print("\n[bold cyan]Sources:[/bold cyan]")
            for source in result.sources:
                console.print(f"  [link={source.uri}]{escape(source.display_title)}[/link]")
                for review in source.review_snippets:
                    console.print(f"    [dim]{escape(review.title or review.snippet or review.uri)}[/dim]")

    asyncio.run(_search())


@app.command()
def solve(
    prompt: str = typer.Argument(..., help="Task to solve"),
    model: str = typer.Option("gemini-2.5-flash", "--model", help="gemini-2.5-flash, gemini-flash-lite-latest or gemini-2.5-pro"),
    thinking: bool = typer.Option(False, "--thinking", "-t", help="Use gemini-2.5-pro with extended thinking"),
    verbose: bool = VERBOSE_OPTION,
):
    """Solve a complex task."""
    async def _solve():
        solver, _ = _tool(TaskSolver, verbose)
        try:
            with console.status("[dim]Thinking...[/dim]" if thinking else "[dim]Working...[/dim]"):
                result = await solver.solve(prompt, model=model, thinking=thinking)
        except (ValueError, RuntimeError) as e:
            _fail(e)

        console.print(Markdown(result.text))
        console.print(f"\n[dim]Model: {result.model}[/dim]")
        if result.usage:
            console.print(f"[dim]Tokens: {result.usage['total_tokens']:,}[/dim]")

    asyncio.run(_solve())


@app.command()
def live(
    voice: str = typer.Option("Zephyr", "--voice", help="Voice of the model"),
    verbose: bool = VERBOSE_OPTION,
):
    """Live voice conversation through the microphone and speakers."""
    async def _live():
        from ..audio import LiveConversation

        settings = get_settings(console)
        conversation = LiveConversation(get_client(settings, console), voice=voice)
        conversation.set_status_callback(lambda status: console.print(f"[dim]Status: {status}[/dim]"))

        printed = {"count": 0}

        def on_transcript(entries) -> None:
            for entry in entries[printed["count"]:]:
                label = "[bold green]Gemini:[/bold green]" if entry.speaker == "model" else "[bold yellow]You:[/bold yellow]"
                console.print(f"{label} {escape(entry.text)}")
            printed["count"] = len(entries)

        conversation.set_transcript_callback(on_transcript)
        if verbose:
            conversation.set_debug_callback(console_debug_callback(console))

        console.print("[bold cyan]Live conversation[/bold cyan] [dim](Ctrl+C to stop)[/dim]")
        try:
            await conversation.start()
            while conversation.is_running:
                await asyncio.sleep(0.2)
        finally:
            await conversation.stop()

    try:
        asyncio.run(_live())
    except KeyboardInterrupt:
        console.print("\n[dim]Goodbye![/dim]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
