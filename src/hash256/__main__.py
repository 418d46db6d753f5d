from multiprocessing import freeze_support
import multiprocessing as mp

from hash256.gui.app import main

if __name__ in {"__main__", "__mp_main__"}:
    freeze_support()
    if mp.current_process().name == "MainProcess":
        main()
