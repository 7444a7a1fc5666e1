# ecochase/ui/app.py
from __future__ import annotations
import pygame
from dataclasses import replace
from .renderer import Renderer, BG_COLOR
from .recorder import Recorder
from .csv_writer import RunCsvLogger
from ..sim.live import LiveSim, Pacer
from ..sim.config import RUN, LOOP, PREDATOR_ALGOS
from ..sim.errors import ConfigurationError


def run_ui(config=None):
    pygame.init()
    pygame.display.set_caption("EcoChase: predator / prey pursuit")
    W, H = 1280, 800
    screen = pygame.display.set_mode((W, H), pygame.RESIZABLE | pygame.SCALED)
    clock = pygame.time.Clock()

    def layout():
        w, h = screen.get_size()
        panel_w = int(w * 0.32)
        world_rect = pygame.Rect(10, 10, w - panel_w - 30, h - 20)
        panel_rect = pygame.Rect(w - panel_w - 10, 110, panel_w, h - 120)
        return world_rect, panel_rect

    renderer = Renderer(screen, *layout())
    live = LiveSim(config if config is not None else RUN)
    logger = RunCsvLogger(ticks_path="runs/ui_ticks.csv", runs_path="runs/ui_runs.csv")
    recorder = Recorder(enabled=False, stride_ticks=1)
    pacer = Pacer(LOOP.tick_interval_ms)

    history = [live.state]
    run_logged = False
    prompt_text = None   # not None while typing a generator prompt
    running = True

    def edit(**changes):
        # settings edits only take effect through a full reset
        nonlocal history, run_logged
        old_seed = live.config.seed
        try:
            live.reset(replace(live.config, **changes))
        except ConfigurationError as e:
            live.warnings.append(str(e))
            return
        _close_run("reset", old_seed)
        history, run_logged = [live.state], False
        logger.new_run()
        pacer.reset()

    def _close_run(note, seed=None):
        nonlocal run_logged
        if not run_logged and len(history) > 1:
            logger.append_run(history, seed=live.config.seed if seed is None else seed, notes=note)
            run_logged = True

    while running:
        elapsed = clock.tick(60)

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode(e.size, pygame.RESIZABLE | pygame.SCALED)
                renderer.screen = screen
                renderer.resize(*layout())
            elif e.type == pygame.KEYDOWN and prompt_text is not None:
                if e.key == pygame.K_ESCAPE: prompt_text = None
                elif e.key == pygame.K_RETURN:
                    if prompt_text.strip():
                        live.request_layout(prompt_text)
                    prompt_text = None
                elif e.key == pygame.K_BACKSPACE: prompt_text = prompt_text[:-1]
                elif e.unicode and e.unicode.isprintable(): prompt_text += e.unicode
            elif e.type == pygame.KEYDOWN:
                if e.key == pygame.K_ESCAPE: running = False
                elif e.key == pygame.K_SPACE:
                    live.toggle_pause()
                    pacer.reset()
                elif e.key == pygame.K_r: edit(seed=live.next_seed())
                elif e.key == pygame.K_n: edit()
                elif e.key == pygame.K_a:
                    i = PREDATOR_ALGOS.index(live.config.predator_algo)
                    edit(predator_algo=PREDATOR_ALGOS[(i + 1) % len(PREDATOR_ALGOS)])
                elif e.key in (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS):
                    edit(num_prey=min(10, live.config.num_prey + 1))
                elif e.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                    edit(num_prey=max(1, live.config.num_prey - 1))
                elif e.key == pygame.K_LEFTBRACKET:
                    edit(grid_size=max(10, live.config.grid_size - 2))
                elif e.key == pygame.K_RIGHTBRACKET:
                    edit(grid_size=min(50, live.config.grid_size + 2))
                elif e.key == pygame.K_o:
                    edit(obstacle_density=round(min(0.6, live.config.obstacle_density + 0.05), 2))
                elif e.key == pygame.K_i:
                    edit(obstacle_density=round(max(0.0, live.config.obstacle_density - 0.05), 2))
                elif e.key == pygame.K_p: renderer.show_path = not renderer.show_path
                elif e.key == pygame.K_g: prompt_text = ""
                elif e.key == pygame.K_e: live.request_explanation()
                elif e.key == pygame.K_v: recorder.toggle()
                elif e.key == pygame.K_c: recorder.clear()
                elif e.key == pygame.K_s: recorder.save_npz()

        # collaborator results land between ticks, never inside one
        epoch = live.epoch
        if "layout" in live.poll() and live.epoch != epoch:
            _close_run("replaced by generated layout")
            history, run_logged = [live.state], False
            logger.new_run()
            pacer.reset()

        for _ in range(pacer.due(elapsed)):
            if not live.step():
                break
            history.append(live.state)
            logger.append_tick(live.state, seed=live.config.seed)
            recorder.maybe_capture(live.state)
        if live.state.is_finished:
            _close_run("finished")

        screen.fill(BG_COLOR)
        renderer.draw_world(live.state)
        renderer.draw_hud(live, recorder.enabled, prompt_text)
        renderer.draw_panel(live)
        pygame.display.flip()

    _close_run("quit")
    live.close()
    pygame.quit()
