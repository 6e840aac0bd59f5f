import customtkinter as ctk
import threading
import logging
import sys

from vodpulse.fetcher import fetch_video_comments
from vodpulse.render import GraphRenderer
from vodpulse.utils import get_base_path
from vodpulse.watcher import VideoWatcher, WatcherState

BUTTON_LABEL = "VodPulse"


class App(ctk.CTk):
    def __init__(self):
        super().__init__()

        self.title("VodPulse")
        self.geometry("1000x360")
        ctk.set_appearance_mode("dark")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self.url_label = ctk.CTkLabel(self, text="Video URL:", font=ctk.CTkFont(weight="bold"))
        self.url_label.grid(row=0, column=0, padx=20, pady=(20, 0), sticky="w")

        # Navigation events: every edit of the location re-evaluates the active video
        self.url_var = ctk.StringVar()
        self.url_entry = ctk.CTkEntry(self, textvariable=self.url_var,
                                      placeholder_text="https://www.twitch.tv/videos/...", width=960)
        self.url_entry.grid(row=1, column=0, padx=20, pady=(0, 10))

        self.settings_frame = ctk.CTkFrame(self)
        self.settings_frame.grid(row=2, column=0, padx=20, pady=10, sticky="ew")
        self.settings_frame.grid_columnconfigure((0, 1, 2), weight=1)

        self.token_label = ctk.CTkLabel(self.settings_frame, text="OAuth token (Optional):")
        self.token_label.grid(row=0, column=0, padx=10, pady=(5, 0), sticky="w")
        self.auth_token = ctk.CTkEntry(self.settings_frame, show="*")
        self.auth_token.grid(row=1, column=0, padx=10, pady=(0, 10), sticky="ew")

        self.cid_label = ctk.CTkLabel(self.settings_frame, text="Client ID (Optional):")
        self.cid_label.grid(row=0, column=1, padx=10, pady=(5, 0), sticky="w")
        self.client_id = ctk.CTkEntry(self.settings_frame)
        self.client_id.grid(row=1, column=1, padx=10, pady=(0, 10), sticky="ew")

        self.fetch_btn = ctk.CTkButton(self.settings_frame, text=BUTTON_LABEL, command=self.start_task,
                                       font=ctk.CTkFont(size=16, weight="bold"), height=40,
                                       fg_color="#772ce8", hover_color="#5c16c5")
        self.fetch_btn.grid(row=1, column=2, padx=10, pady=(0, 10), sticky="ew")

        self.canvas = ctk.CTkCanvas(self, highlightthickness=0, background="#18181b")
        self.canvas.grid(row=3, column=0, padx=20, pady=(0, 20), sticky="nsew")
        self.renderer = GraphRenderer(self.canvas)
        self.canvas.bind("<Configure>", self.on_resize)

        self.watcher = VideoWatcher()
        self.watcher.subscribe(self.on_watcher_change)
        self.url_var.trace_add("write", lambda *_: self.watcher.navigate(self.url_var.get()))
        self.on_watcher_change(self.watcher)

        logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s]: %(message)s',
                            datefmt='%H:%M:%S', stream=sys.stderr)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.info(f"App initialized. Base path: {get_base_path()}")

    def on_watcher_change(self, watcher):
        if watcher.state is WatcherState.NO_VIDEO:
            self.renderer.clear()
            self.fetch_btn.configure(state="disabled", text=BUTTON_LABEL)
        elif watcher.result is None:
            self.renderer.clear()
            self.fetch_btn.configure(state="normal", text=BUTTON_LABEL)
        else:
            self.renderer.draw(watcher.result, self.canvas.winfo_width(), self.canvas.winfo_height())

    def on_resize(self, event):
        self.renderer.redraw(event.width, event.height)

    def start_task(self):
        ticket = self.watcher.begin_fetch()
        if ticket is None:
            return
        self.fetch_btn.configure(state="disabled", text="0%")

        client_id = self.client_id.get().strip() or None
        auth_token = self.auth_token.get().strip() or None
        thread = threading.Thread(target=self.run_fetch, args=(ticket, client_id, auth_token), daemon=True)
        thread.start()

    def run_fetch(self, ticket, client_id, auth_token):
        def on_progress(covered, total):
            self.after(0, self.show_progress, ticket, round(covered / total * 100))

        result = None
        try:
            result = fetch_video_comments(
                ticket.video_id,
                client_id=client_id,
                auth_token=auth_token,
                on_progress=on_progress,
                current_video_id=self.watcher.current_video_id,
            )
        except Exception as e:
            logging.error(f"Fetch failed: {e}")
        finally:
            self.after(0, self.finish_fetch, ticket, result)

    def show_progress(self, ticket, percent):
        # Progress of a revoked fetch must not touch the button of the active video
        if self.watcher.owns(ticket):
            self.fetch_btn.configure(text=f"{percent}%")

    def finish_fetch(self, ticket, result):
        owned = self.watcher.owns(ticket)
        stored = self.watcher.complete(ticket, result)
        if owned:
            self.fetch_btn.configure(state="normal", text="Done" if stored else BUTTON_LABEL)


def main():
    app = App()
    app.mainloop()


if __name__ == "__main__":
    main()
