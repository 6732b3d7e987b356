from plotting.plotting import Plotter, PlotTheme
