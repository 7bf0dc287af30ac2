# main.py
"""
Main entry point for the Particle Dataset Renderer.

This script orchestrates the renderer lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Builds the gradient, the preview host and the pipeline.
4. Loads the dataset and runs the preview loop.
5. Handles clean shutdown.
"""
import logging
import sys
from utils import dataset_path, load_config, pipeline_params, setup_logging
import cProfile
import pstats
import io

def main(config_path: str = 'config.json'):
    """
    The main function to run the renderer.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Particle Dataset Renderer Starting ---")

    appearance_params = config.get('appearance', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from dataset import read_dataset_text
    from gradient import Gradient
    from pipeline import ParticleDatasetPipeline
    from visualization import Visualizer

    # --- Component Initialization ---
    # 1. The visualizer is the render host; it decides the capacity.
    visualizer = Visualizer(vis_params)

    # 2. The pipeline is bounded by the host and colored by the configured gradient.
    gradient = Gradient.from_config(appearance_params.get('gradient'))
    pipeline = ParticleDatasetPipeline(
        pipeline_params(config),
        gradient,
        capacity=visualizer.max_particles,
    )
    pipeline.attach(visualizer)

    # 3. Initial load.
    try:
        text = read_dataset_text(dataset_path(config))
    except OSError as e:
        logging.critical(f"Could not read dataset: {e}")
        visualizer.close()
        return

    report = pipeline.load(text)
    if report.skipped_count:
        logging.warning(f"{report.skipped_count} rows were skipped while loading.")
    if not report.ok:
        logging.error(f"Initial load reported: {report.error}")

    profiler = cProfile.Profile()

    log_throttle = run_params.get('log_throttle_frames', 300)
    max_frames = run_params.get('max_frames', 0)  # 0 runs until the window is closed

    running = True
    frame_num = 0

    profiler.enable()
    while running:
        if not visualizer.draw(pipeline):
            running = False
        frame_num += 1

        if frame_num % log_throttle == 0:
            logging.info(f"Frame {frame_num} | {len(pipeline.state.primitives)} particles on screen")

        if max_frames and frame_num >= max_frames:
            logging.info(f"Reached max_frames ({max_frames}). Stopping renderer.")
            running = False
    profiler.disable()

    visualizer.close()
    logging.info("Render loop finished.")

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Dataset Renderer Shutting Down ---")


if __name__ == "__main__":
    main(*sys.argv[1:2])
