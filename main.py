import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from config.config import Config
from models.errors import InvalidSearchRequestError
from models.search_request import SearchRequest
from orchestrator.core import ResearchOrchestrator


def show_loading_animation(stop_event: threading.Event) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
    """
    while not stop_event.is_set():
        for char in "|/-\\":
            if stop_event.is_set():
                break
            sys.stdout.write(f"\r\033[93mSearching {char}\033[0m")
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write("\r" + " " * 20 + "\r")
    sys.stdout.flush()


def print_sources(sources) -> None:
    if not sources:
        return
    print("\nSources:")
    for index, source in enumerate(sources, start=1):
        print(f"  [{index}] ({source.type.value}) {source.title}")
        print(f"      {source.url}")


def print_providers(orchestrator: ResearchOrchestrator) -> None:
    print("\n=== Providers ===")
    for status in orchestrator.router.provider_status():
        state = "available" if status.available else "cooling down"
        print(f"{status.priority}. {status.provider_id} - {state}")
    print()


def main():
    config = Config()
    if not config.validate():
        print("Continuing without an AI provider; answers will be degraded.\n")

    try:
        orchestrator = ResearchOrchestrator.from_config(config)
    except Exception as e:
        print(f"Error initializing research engine: {str(e)}")
        return

    conversation_id = None

    print("\n=== Deep Archive Research ===")
    print(f"Web engines: {config.get_engine_info()}")
    print("Type 'exit' to quit, 'new' to start a new conversation, or 'help' for commands\n")

    while True:
        try:
            user_input = input("You: ").strip()

            if not user_input:
                continue

            if user_input.lower() in ("exit", "quit"):
                print("\nGoodbye!")
                break

            if user_input.lower() == "new":
                conversation_id = None
                print("\nStarted a new conversation.\n")
                continue

            if user_input.lower() == "providers":
                print_providers(orchestrator)
                continue

            if user_input.lower() == "help":
                print("\n=== Available Commands ===")
                print("help      - Show this help message")
                print("new       - Start a new conversation")
                print("providers - Show AI provider availability")
                print("exit/quit - Exit the program\n")
                continue

            request = SearchRequest(query=user_input, conversation_id=conversation_id)

            # Show loading animation in a separate thread
            stop_animation = threading.Event()
            loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
            loading_thread.daemon = True
            loading_thread.start()

            try:
                result = orchestrator.answer_sync(request)
            finally:
                stop_animation.set()
                loading_thread.join()

            conversation_id = result.conversation_id
            print(f"\nAI: {result.answer_text}")
            print_sources(result.sources)
            if result.model_used:
                print(f"[Answered by {result.model_used}]\n")
            else:
                print("[No AI provider available]\n")

        except InvalidSearchRequestError as e:
            print(f"\nInvalid request: {e}")
            continue
        except KeyboardInterrupt:
            print("\nExiting...")
            break
        except Exception as e:
            print(f"\nError: {str(e)}")
            continue


if __name__ == "__main__":
    main()
